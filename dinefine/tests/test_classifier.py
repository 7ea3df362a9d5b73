from __future__ import annotations

from dinefine.search.classifier import (
    describe_extracted_preferences,
    process_natural_language_query,
)
from dinefine.search.models import UserPreferences


# ── Cuisine ──────────────────────────────────────────────────────────────


class TestCuisine:
    def test_pizza_maps_to_italian(self):
        assert process_natural_language_query("best pizza in town").cuisine_type == "Italian"

    def test_sushi_maps_to_japanese(self):
        assert process_natural_language_query("Sushi tonight").cuisine_type == "Japanese"

    def test_first_rule_wins(self):
        # "pasta" (Italian) is checked before "curry" (Indian)
        prefs = process_natural_language_query("pasta or curry")
        assert prefs.cuisine_type == "Italian"

    def test_spicy_maps_to_indian(self):
        assert process_natural_language_query("something spicy").cuisine_type == "Indian"

    def test_no_cuisine_leaves_field_unset(self):
        prefs = process_natural_language_query("somewhere nice")
        assert prefs.cuisine_type is None
        assert "cuisine_type" not in prefs.model_fields_set


# ── Dietary / allergies ──────────────────────────────────────────────────


class TestDietary:
    def test_vegan_sets_cuisine_and_dietary(self):
        prefs = process_natural_language_query("vegan food")
        assert prefs.cuisine_type == "Vegetarian"
        assert prefs.dietary_restrictions == ["Vegan"]

    def test_gluten_free_needs_both_words(self):
        assert process_natural_language_query("gluten free pasta").dietary_restrictions == ["Gluten-Free"]
        assert process_natural_language_query("gluten please").dietary_restrictions == []

    def test_multiple_dietary_labels(self):
        prefs = process_natural_language_query("halal and kosher options")
        assert prefs.dietary_restrictions == ["Halal", "Kosher"]

    def test_allergy_patterns(self):
        prefs = process_natural_language_query("no peanut please, I have a shellfish allergy")
        assert "Peanuts" in prefs.allergies
        assert "Shellfish" in prefs.allergies

    def test_each_peanut_phrasing(self):
        for query in ("no peanut sauce", "peanut allergy here", "peanut-free dessert"):
            assert "Peanuts" in process_natural_language_query(query).allergies, query

    def test_repeated_dietary_phrase_counted_once(self):
        prefs = process_natural_language_query("gluten free, gluten-free please")
        assert prefs.dietary_restrictions == ["Gluten-Free"]

    def test_allergy_labels_not_duplicated(self):
        prefs = process_natural_language_query("wheat-free and gluten-free")
        assert prefs.allergies.count("Wheat") == 1


# ── Price / location / hours ─────────────────────────────────────────────


class TestPriceAndLocation:
    def test_inexpensive_is_budget_not_upscale(self):
        assert process_natural_language_query("inexpensive tacos").price_range == "$"

    def test_expensive(self):
        assert process_natural_language_query("an expensive dinner").price_range == "$$$"

    def test_fine_dining(self):
        assert process_natural_language_query("fine dining").price_range == "$$$$"

    def test_always_current_location(self):
        assert process_natural_language_query("anything").use_current_location is True
        assert process_natural_language_query("thai nearby").use_current_location is True

    def test_within_miles_sets_radius(self):
        prefs = process_natural_language_query("thai within 3 miles")
        assert prefs.radius_meters == 3 * 1609

    def test_open_now(self):
        assert process_natural_language_query("tacos open now").open_now is True
        assert process_natural_language_query("tacos").open_now is False


def test_empty_query_only_sets_location_intent():
    prefs = process_natural_language_query("")
    assert prefs.model_fields_set == {"use_current_location"}


# ── Assistant reply ──────────────────────────────────────────────────────


class TestDescribe:
    def test_cuisine_reply(self):
        prefs = UserPreferences(cuisine_type="Thai")
        assert describe_extracted_preferences("thai", prefs) == (
            "I'll look for Thai restaurants near your location."
        )

    def test_dietary_reply(self):
        prefs = UserPreferences(dietary_restrictions=["Halal", "Kosher"])
        assert describe_extracted_preferences("x", prefs) == (
            "Looking for restaurants with Halal, Kosher options."
        )

    def test_price_reply(self):
        prefs = UserPreferences(price_range="$")
        assert describe_extracted_preferences("x", prefs) == (
            "Searching for budget-friendly restaurants in your area."
        )

    def test_fallback_echoes_query(self):
        assert describe_extracted_preferences("date night", UserPreferences()) == (
            'Searching for "date night" near your location.'
        )
