from __future__ import annotations

from decimal import Decimal

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import UserPreferences


def _format_decimal(value: float) -> str:
    """Render a coordinate in plain fixed-point notation.

    Uses the shortest round-trip digits, never an exponent, and no trailing
    ``.0`` for whole numbers (``1e-05`` -> ``"0.00001"``, ``2.0`` -> ``"2"``).
    """
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)), "f")


def build_search_params(
    preferences: UserPreferences,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> dict[str, str]:
    """Map preferences onto query parameters for the search provider.

    Key order is stable: location keys, ``radius``, then the optional
    ``categories``, ``price``, ``attributes`` and ``open_now`` filters.
    """
    params: dict[str, str] = {}

    if preferences.coordinates is not None:
        params["latitude"] = _format_decimal(preferences.coordinates.lat)
        params["longitude"] = _format_decimal(preferences.coordinates.lng)
    elif preferences.location:
        params["location"] = preferences.location
    else:
        params["location"] = config.default_location

    params["radius"] = str(preferences.radius_meters or config.default_radius_m)

    if preferences.cuisine_type:
        params["categories"] = preferences.cuisine_type.lower()

    if preferences.price_range:
        # "$".."$$$$" -> "1".."4"
        params["price"] = str(len(preferences.price_range))

    if preferences.dietary_restrictions:
        params["attributes"] = ",".join(preferences.dietary_restrictions).lower()

    if preferences.open_now:
        params["open_now"] = "true"

    return params
