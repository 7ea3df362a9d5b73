from __future__ import annotations

import os
from unittest.mock import patch

# Must be set before any dinefine config module is imported.
os.environ["DINEFINE_MOCK_DELAY"] = "0"
os.environ["DINEFINE_GEOCODING"] = "0"
os.environ["GROQ_API_KEY"] = ""

import bcrypt  # noqa: E402
import pytest  # noqa: E402

from dinefine.auth.users import reset_users  # noqa: E402
from dinefine.storage.rows import clear_store  # noqa: E402

_gensalt = bcrypt.gensalt

# Minimum cost factor; the seeded accounts are re-hashed before every test.
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture(autouse=True, scope="session")
def fast_password_hashing():
    with patch("bcrypt.gensalt", lambda rounds=12, prefix=b"2b": _gensalt(TEST_BCRYPT_ROUNDS, prefix)):
        yield


@pytest.fixture(autouse=True)
def fresh_state(fast_password_hashing):
    clear_store()
    reset_users()
    yield
    clear_store()
