from __future__ import annotations

DIETARY_OPTIONS = [
    "Vegetarian",
    "Vegan",
    "Gluten-Free",
    "Halal",
    "Kosher",
    "Dairy-Free",
    "Nut-Free",
]

ALLERGY_OPTIONS = [
    "Peanuts",
    "Tree Nuts",
    "Milk",
    "Eggs",
    "Fish",
    "Shellfish",
    "Wheat",
    "Soy",
]

CUISINE_TYPES = [
    "Italian",
    "Chinese",
    "Mexican",
    "Indian",
    "Japanese",
    "Thai",
    "American",
    "Mediterranean",
    "French",
]

PRICE_RANGES = [
    {"label": "Budget ($0 - $15)", "value": "$"},
    {"label": "Moderate ($15 - $30)", "value": "$$"},
    {"label": "High-End ($30 - $60)", "value": "$$$"},
    {"label": "Fine Dining ($60+)", "value": "$$$$"},
]
