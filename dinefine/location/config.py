from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeocodingConfig:
    user_agent: str = os.getenv("GEOCODER_USER_AGENT", "dinefine")
    timeout: float = 5.0
    enabled: bool = os.getenv("DINEFINE_GEOCODING", "1") not in ("0", "false", "False")


DEFAULT_GEOCODING_CONFIG = GeocodingConfig()
