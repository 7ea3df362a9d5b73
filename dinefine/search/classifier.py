from __future__ import annotations

import re
from typing import Any

from .models import UserPreferences

METERS_PER_MILE = 1609

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

# Checked top to bottom; the first matching rule sets the cuisine.
_CUISINE_RULES: list[tuple[tuple[str, ...], str]] = [
    (("italian", "pasta", "pizza"), "Italian"),
    (("japanese", "sushi"), "Japanese"),
    (("chinese",), "Chinese"),
    (("mexican", "taco"), "Mexican"),
    (("indian", "curry", "spicy"), "Indian"),
    (("thai",), "Thai"),
    (("vegetarian", "vegan"), "Vegetarian"),
]

# Every rule is tested; all terms of a rule must be present.
_DIETARY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("vegetarian",), "Vegetarian"),
    (("vegan",), "Vegan"),
    (("gluten", "free"), "Gluten-Free"),
    (("halal",), "Halal"),
    (("kosher",), "Kosher"),
    (("dairy", "free"), "Dairy-Free"),
    (("nut", "free"), "Nut-Free"),
]

# "inexpensive" contains "expensive", so budget must be checked first.
_PRICE_RULES: list[tuple[tuple[str, ...], str]] = [
    (("cheap", "inexpensive", "budget"), "$"),
    (("moderate", "mid-range"), "$$"),
    (("expensive", "high-end"), "$$$"),
    (("luxury", "fine dining"), "$$$$"),
]

_NEARBY_TERMS = ("near me", "nearby", "close by")

_OPEN_NOW_TERMS = ("open now", "currently open")

ALLERGY_KEYWORDS: dict[str, str] = {
    "peanut": "Peanuts",
    "nut": "Tree Nuts",
    "dairy": "Milk",
    "egg": "Eggs",
    "fish": "Fish",
    "shellfish": "Shellfish",
    "wheat": "Wheat",
    "gluten": "Wheat",
    "soy": "Soy",
}

_ALLERGY_PATTERNS = ("no {}", "{} allergy", "{}-free")

_DISTANCE_RE = re.compile(r"within (\d+) miles?", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def _extract_cuisine(text: str) -> str | None:
    for keywords, cuisine in _CUISINE_RULES:
        if any(k in text for k in keywords):
            return cuisine
    return None


def _extract_dietary(text: str) -> list[str]:
    found: list[str] = []
    for terms, label in _DIETARY_RULES:
        if all(t in text for t in terms) and label not in found:
            found.append(label)
    return found


def _extract_price(text: str) -> str | None:
    for keywords, price in _PRICE_RULES:
        if any(k in text for k in keywords):
            return price
    return None


def _extract_allergies(text: str) -> list[str]:
    found: list[str] = []
    for keyword, label in ALLERGY_KEYWORDS.items():
        if label in found:
            continue
        if any(p.format(keyword) in text for p in _ALLERGY_PATTERNS):
            found.append(label)
    return found


def _extract_radius_meters(text: str) -> int | None:
    match = _DISTANCE_RE.search(text)
    if not match:
        return None
    miles = int(match.group(1))
    return miles * METERS_PER_MILE if miles > 0 else None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def process_natural_language_query(query: str) -> UserPreferences:
    """Classify a free-text query into a partial preference update.

    Only fields the keyword rules are confident about are set on the returned
    object (``model_fields_set``), so it can be layered over existing
    preferences with :func:`~dinefine.search.models.apply_preference_update`.
    The location intent is always current-location; nearby phrasing only
    confirms it.
    """
    text = (query or "").lower()

    fields: dict[str, Any] = {"use_current_location": True}

    cuisine = _extract_cuisine(text)
    if cuisine:
        fields["cuisine_type"] = cuisine

    dietary = _extract_dietary(text)
    if dietary:
        fields["dietary_restrictions"] = dietary

    price = _extract_price(text)
    if price:
        fields["price_range"] = price

    if any(term in text for term in _NEARBY_TERMS):
        fields["use_current_location"] = True

    radius = _extract_radius_meters(text)
    if radius:
        fields["radius_meters"] = radius

    if any(term in text for term in _OPEN_NOW_TERMS):
        fields["open_now"] = True

    allergies = _extract_allergies(text)
    if allergies:
        fields["allergies"] = allergies

    return UserPreferences(**fields)


_PRICE_DESCRIPTIONS = {
    "$": "budget-friendly",
    "$$": "moderately priced",
    "$$$": "upscale",
    "$$$$": "fine dining",
}


def describe_extracted_preferences(query: str, preferences: UserPreferences) -> str:
    """One-line assistant reply summarising what was understood."""
    if preferences.cuisine_type:
        return f"I'll look for {preferences.cuisine_type} restaurants near your location."
    if preferences.dietary_restrictions:
        return (
            "Looking for restaurants with "
            f"{', '.join(preferences.dietary_restrictions)} options."
        )
    if preferences.price_range:
        desc = _PRICE_DESCRIPTIONS[preferences.price_range]
        return f"Searching for {desc} restaurants in your area."
    return f'Searching for "{query}" near your location.'
