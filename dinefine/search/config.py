from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

PLACEHOLDER_IMAGE_URL = (
    "https://images.unsplash.com/photo-1517248135467-4c7edcad34c4"
    "?q=80&w=2070&auto=format&fit=crop"
)


@dataclass(frozen=True)
class SearchConfig:
    # Provider credentials; the bundled provider is a mock and ignores it.
    api_key: str = os.getenv("RESTAURANT_API_KEY", "YOUR_API_KEY")
    default_location: str = "San Francisco"
    default_radius_m: int = 2000
    mock_delay_s: float = float(os.getenv("DINEFINE_MOCK_DELAY", "1.0"))
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL
    data_dir: Path = Path(__file__).resolve().parent.parent / "data"


DEFAULT_SEARCH_CONFIG = SearchConfig()
