from __future__ import annotations

import logging
import math
import uuid
from typing import Any

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import Coordinates, Restaurant

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609
DEFAULT_RATING = 4.0
DEFAULT_PRICE_LEVEL = "$$"
UNKNOWN_DISTANCE = "Distance unknown"

_PRICE_TABLE: dict[str, str] = {
    "$": "$",
    "1": "$",
    "$$": "$$",
    "2": "$$",
    "$$$": "$$$",
    "3": "$$$",
    "$$$$": "$$$$",
    "4": "$$$$",
}


def _text(raw: Any) -> str | None:
    """A non-blank string, or ``None`` for anything else."""
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def _number(raw: Any) -> float | None:
    """A finite float, or ``None``; booleans are not numbers here."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _map_price(raw: Any) -> str:
    if not isinstance(raw, str):
        return DEFAULT_PRICE_LEVEL
    return _PRICE_TABLE.get(raw.strip(), DEFAULT_PRICE_LEVEL)


def _normalize_rating(raw: Any) -> float:
    value = _number(raw)
    if value is None:
        return DEFAULT_RATING
    return max(0.0, min(5.0, value))


def _format_distance(raw: Any) -> str:
    meters = _number(raw)
    if meters is None:
        return UNKNOWN_DISTANCE
    return f"{meters / METERS_PER_MILE:.1f} miles"


def _first_category(raw: Any) -> str | None:
    if isinstance(raw, list) and raw and isinstance(raw[0], dict):
        return _text(raw[0].get("title"))
    return None


def _address_line(raw: Any) -> str | None:
    if isinstance(raw, dict):
        return _text(raw.get("address1"))
    return None


def _format_hours(raw: Any) -> list[str]:
    if not isinstance(raw, list) or not raw or not isinstance(raw[0], dict):
        return []
    slots = raw[0].get("open")
    if not isinstance(slots, list):
        return []
    return [
        f"{h.get('day')}: {h.get('start')}-{h.get('end')}"
        for h in slots
        if isinstance(h, dict)
    ]


def _coordinates(raw: Any) -> Coordinates | None:
    if not isinstance(raw, dict):
        return None
    lat, lng = _number(raw.get("latitude")), _number(raw.get("longitude"))
    if lat is None or lng is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return Coordinates(lat=lat, lng=lng)


def _restaurant_id(raw: Any) -> str:
    if isinstance(raw, (str, int)) and not isinstance(raw, bool) and str(raw).strip():
        return str(raw).strip()
    generated = uuid.uuid4().hex
    logger.debug("Provider record without usable id, assigned %s", generated)
    return generated


def normalize_result(
    item: dict[str, Any],
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> Restaurant:
    """Convert one provider record into the canonical :class:`Restaurant`.

    Every field is coerced on its own; a malformed value falls back to that
    field's default instead of rejecting the record.
    """
    if not isinstance(item, dict):
        item = {}

    return Restaurant(
        id=_restaurant_id(item.get("id")),
        name=_text(item.get("name")) or "Unnamed restaurant",
        image_url=_text(item.get("image_url")) or config.placeholder_image_url,
        cuisine_type=_first_category(item.get("categories")) or "Restaurant",
        rating=_normalize_rating(item.get("rating")),
        price_level=_map_price(item.get("price")),
        address=_address_line(item.get("location")) or "Address unavailable",
        distance=_format_distance(item.get("distance")),
        dietary_options=[],
        pros=[],
        cons=[],
        phone=_text(item.get("phone")),
        website=_text(item.get("url")),
        hours=_format_hours(item.get("hours")),
        allergy_info=[],
        coordinates=_coordinates(item.get("coordinates")),
    )


def transform_results(
    results: list[dict[str, Any]],
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[Restaurant]:
    """Normalise provider records one-to-one, preserving order."""
    return [normalize_result(item, config) for item in results]
