from __future__ import annotations

import uuid
from typing import Any

import bcrypt

from ..storage.profiles import create_profile, update_profile, username_key

_users: dict[str, dict[str, Any]] = {}


class AccountExists(Exception):
    """Raised when an email or username is already registered."""


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record["id"],
        "email": record["email"],
        "username": record["username"],
        "role": record["role"],
    }


def _find(identifier: str) -> dict[str, Any] | None:
    key = username_key(identifier)
    for record in _users.values():
        if record["email"] == key or username_key(record["username"]) == key:
            return record
    return None


def sign_up(
    email: str,
    password: str,
    username: str,
    phone_number: str | None = None,
    role: str = "user",
) -> dict[str, Any]:
    """Register an account and create its profile row.

    Returns ``{id, email, username, role}``; raises ``AccountExists``.
    """
    email = email.strip().lower()
    if _find(email) or _find(username):
        raise AccountExists("An account with this email or username already exists")

    user_id = uuid.uuid4().hex
    record = {
        "id": user_id,
        "email": email,
        "username": username.strip(),
        "role": role,
        "password_hash": _hash_password(password),
    }
    _users[user_id] = record
    create_profile(user_id, record["username"], phone_number)
    return _public(record)


def authenticate(identifier: str, password: str) -> dict[str, Any] | None:
    """Verify credentials by email or username. Returns the public user or ``None``."""
    record = _find(identifier)
    if record and _verify_password(password, record["password_hash"]):
        return _public(record)
    return None


def change_username(user_id: str, username: str) -> dict[str, Any]:
    """Rename the account and its profile together; returns the profile row.

    Names compare case-insensitively, so only the same user may re-case their
    own name. Raises ``AccountExists``, or ``UniqueViolation`` from storage.
    """
    existing = _find(username)
    if existing and existing["id"] != user_id:
        raise AccountExists("An account with this email or username already exists")

    profile = update_profile(user_id, username=username)
    record = _users.get(user_id)
    if record is not None:
        record["username"] = profile["username"]
    return profile


def seed_users() -> None:
    """Pre-seed demo accounts (idempotent)."""
    if not _find("demo"):
        sign_up("demo@dinefine.app", "demo123", "demo")
    if not _find("admin"):
        sign_up("admin@dinefine.app", "admin123", "admin", role="admin")


def reset_users() -> None:
    _users.clear()
    seed_users()


seed_users()
