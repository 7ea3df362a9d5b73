from __future__ import annotations

import logging
from enum import Enum

from geopy.geocoders import Nominatim

from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig

logger = logging.getLogger(__name__)


class GeolocationErrorKind(str, Enum):
    permission_denied = "permission_denied"
    position_unavailable = "position_unavailable"
    timeout = "timeout"
    unknown = "unknown"


GEOLOCATION_MESSAGES: dict[GeolocationErrorKind, str] = {
    GeolocationErrorKind.permission_denied: "Location permission denied. Please allow location access.",
    GeolocationErrorKind.position_unavailable: "Location information is unavailable.",
    GeolocationErrorKind.timeout: "Location request timed out.",
    GeolocationErrorKind.unknown: "Unknown error occurred while getting location",
}

UNSUPPORTED_MESSAGE = "Geolocation is not supported by your browser"
ADDRESS_NOT_FOUND = "Address not found"


def describe_geolocation_error(kind: GeolocationErrorKind | str | None) -> str:
    try:
        return GEOLOCATION_MESSAGES[GeolocationErrorKind(kind)]
    except ValueError:
        return GEOLOCATION_MESSAGES[GeolocationErrorKind.unknown]


def format_coordinates(lat: float, lng: float) -> str:
    return f"Location found ({lat:.4f}, {lng:.4f})"


_geolocator: Nominatim | None = None


def _get_geolocator(config: GeocodingConfig) -> Nominatim:
    global _geolocator
    if _geolocator is None:
        _geolocator = Nominatim(user_agent=config.user_agent, timeout=config.timeout)
    return _geolocator


def reverse_geocode(
    lat: float,
    lng: float,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
) -> str:
    """
    Convert coordinates -> display address.
    Falls back to a formatted coordinate string when the lookup fails.
    """
    if not config.enabled:
        return format_coordinates(lat, lng)
    try:
        result = _get_geolocator(config).reverse((lat, lng), exactly_one=True, zoom=18)
        if not result or not result.address:
            return ADDRESS_NOT_FOUND
        return result.address
    except Exception:
        logger.warning("Reverse geocoding failed for (%s, %s)", lat, lng, exc_info=True)
        return format_coordinates(lat, lng)
