"""
Location helpers.

Responsibilities:
- Translate browser geolocation failures into user-facing messages.
- Reverse geocode coordinates into a display address via Nominatim.
"""
