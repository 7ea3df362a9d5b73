from __future__ import annotations

import asyncio
from unittest.mock import patch

from dinefine.search.models import (
    PRICE_LEVELS,
    Coordinates,
    PreferenceUpdate,
    UserPreferences,
    apply_preference_update,
)
from dinefine.search.normalizer import normalize_result, transform_results
from dinefine.search.params import build_search_params
from dinefine.search.service import (
    get_restaurant_details,
    remember_search,
    search_restaurants,
    summarize_results,
)


# ── Search parameters ────────────────────────────────────────────────────


class TestSearchParams:
    def test_defaults(self):
        params = build_search_params(UserPreferences())
        assert params == {"location": "San Francisco", "radius": "2000"}

    def test_coordinates_take_precedence(self):
        prefs = UserPreferences(
            coordinates=Coordinates(lat=37.7749, lng=-122.4194),
            location="Oakland",
        )
        params = build_search_params(prefs)
        assert params["latitude"] == "37.7749"
        assert params["longitude"] == "-122.4194"
        assert "location" not in params

    def test_whole_number_coordinates_have_no_decimal(self):
        params = build_search_params(UserPreferences(coordinates=Coordinates(lat=1.0, lng=2)))
        assert params["latitude"] == "1"
        assert params["longitude"] == "2"

    def test_small_coordinates_use_plain_notation(self):
        params = build_search_params(
            UserPreferences(coordinates=Coordinates(lat=0.00001, lng=-0.5))
        )
        assert params["latitude"] == "0.00001"
        assert params["longitude"] == "-0.5"

    def test_text_location(self):
        assert build_search_params(UserPreferences(location="Oakland"))["location"] == "Oakland"

    def test_filters(self):
        prefs = UserPreferences(
            cuisine_type="Italian",
            price_range="$$$",
            dietary_restrictions=["Vegan", "Gluten-Free"],
            radius_meters=4827,
            open_now=True,
        )
        params = build_search_params(prefs)
        assert params["categories"] == "italian"
        assert params["price"] == "3"
        assert params["attributes"] == "vegan,gluten-free"
        assert params["radius"] == "4827"
        assert params["open_now"] == "true"
        assert list(params) == [
            "location", "radius", "categories", "price", "attributes", "open_now",
        ]

    def test_empty_lists_are_omitted(self):
        params = build_search_params(UserPreferences(dietary_restrictions=[]))
        assert "attributes" not in params


# ── Normalisation ────────────────────────────────────────────────────────


class TestNormalizer:
    def test_full_record(self):
        restaurant = normalize_result({
            "id": "abc",
            "name": "Test Place",
            "image_url": "https://example.com/x.jpg",
            "categories": [{"title": "Thai"}],
            "rating": 4.4,
            "price": "$$$$",
            "location": {"address1": "1 Road"},
            "distance": 3218,
            "phone": "555",
            "url": "https://example.com",
            "hours": [{"open": [{"day": 0, "start": "1100", "end": "2200"}]}],
            "coordinates": {"latitude": 1.5, "longitude": 2.5},
        })
        assert restaurant.id == "abc"
        assert restaurant.cuisine_type == "Thai"
        assert restaurant.price_level == "$$$$"
        assert restaurant.address == "1 Road"
        assert restaurant.distance == "2.0 miles"
        assert restaurant.website == "https://example.com"
        assert restaurant.hours == ["0: 1100-2200"]
        assert restaurant.coordinates == Coordinates(lat=1.5, lng=2.5)
        assert restaurant.dietary_options == []

    def test_defaults_for_missing_fields(self):
        restaurant = normalize_result({})
        assert restaurant.id
        assert restaurant.name == "Unnamed restaurant"
        assert restaurant.cuisine_type == "Restaurant"
        assert restaurant.rating == 4.0
        assert restaurant.price_level == "$$"
        assert restaurant.address == "Address unavailable"
        assert restaurant.distance == "Distance unknown"
        assert restaurant.image_url.startswith("https://images.unsplash.com/")
        assert restaurant.coordinates is None

    def test_rating_is_clamped(self):
        assert normalize_result({"rating": 7}).rating == 5.0
        assert normalize_result({"rating": -1}).rating == 0.0

    def test_numeric_price_codes(self):
        assert normalize_result({"price": "1"}).price_level == "$"
        assert normalize_result({"price": "bogus"}).price_level == "$$"
        assert normalize_result({"price": 3}).price_level == "$$"

    def test_zero_distance(self):
        assert normalize_result({"distance": 0}).distance == "0.0 miles"

    def test_generated_ids_are_distinct(self):
        results = transform_results([{}, {}])
        assert results[0].id != results[1].id

    def test_order_preserved(self):
        results = transform_results([{"id": "b"}, {"id": "a"}])
        assert [r.id for r in results] == ["b", "a"]

    def test_price_code_without_rating(self):
        restaurant = normalize_result({"price": "4"})
        assert restaurant.price_level == "$$$$"
        assert restaurant.rating == 4.0

    def test_dollar_and_numeric_codes_agree(self):
        assert normalize_result({"price": "$$"}).price_level == "$$"
        assert normalize_result({"price": "2"}).price_level == "$$"

    def test_wrongly_typed_text_fields_use_defaults(self):
        restaurant = normalize_result({
            "id": "x",
            "name": 123,
            "image_url": ["not", "a", "url"],
            "categories": [{"title": 7}],
            "location": {"address1": None},
            "phone": 5551234,
            "url": {"href": "https://example.com"},
        })
        assert restaurant.name == "Unnamed restaurant"
        assert restaurant.image_url.startswith("https://images.unsplash.com/")
        assert restaurant.cuisine_type == "Restaurant"
        assert restaurant.address == "Address unavailable"
        assert restaurant.phone is None
        assert restaurant.website is None

    def test_bad_coordinates_are_dropped(self):
        assert normalize_result({"coordinates": {"latitude": 95.0, "longitude": 0}}).coordinates is None
        assert normalize_result({"coordinates": {"latitude": "north", "longitude": 1}}).coordinates is None
        assert normalize_result({"coordinates": {"latitude": 10, "longitude": 181}}).coordinates is None

    def test_non_finite_numbers(self):
        restaurant = normalize_result({"rating": float("nan"), "distance": float("inf")})
        assert restaurant.rating == 4.0
        assert restaurant.distance == "Distance unknown"

    def test_malformed_record_keeps_its_slot(self):
        results = transform_results([
            {"id": "a", "name": "A"},
            {"id": "b", "name": 123, "coordinates": {"latitude": 95.0, "longitude": 0}},
            "garbage",
            {"id": "c", "name": "C"},
        ])
        assert len(results) == 4
        assert [results[0].id, results[1].id, results[3].id] == ["a", "b", "c"]
        assert results[1].name == "Unnamed restaurant"
        assert results[2].name == "Unnamed restaurant"


# ── Orchestrator ─────────────────────────────────────────────────────────


class TestSearchRestaurants:
    def test_returns_bundled_results(self):
        results = asyncio.run(search_restaurants(UserPreferences()))
        assert [r.id for r in results] == ["real-1", "real-2", "real-3", "real-4", "real-5"]
        assert results[0].distance == "0.7 miles"
        assert results[4].price_level == "$"

    def test_custom_fetch_receives_params(self):
        seen = {}

        async def fetch(params):
            seen.update(params)
            return [{"id": "x", "name": "X"}]

        results = asyncio.run(
            search_restaurants(UserPreferences(cuisine_type="Thai"), fetch=fetch)
        )
        assert seen["categories"] == "thai"
        assert [r.name for r in results] == ["X"]

    def test_fetch_failure_returns_empty(self):
        async def fetch(params):
            raise ConnectionError("provider down")

        assert asyncio.run(search_restaurants(UserPreferences(), fetch=fetch)) == []

    @patch("dinefine.search.service.mock_fetch_from_api")
    def test_default_provider_failure_returns_empty(self, mock_fetch):
        mock_fetch.side_effect = RuntimeError("boom")
        assert asyncio.run(search_restaurants(UserPreferences())) == []

    def test_every_result_has_name_and_known_price(self):
        results = asyncio.run(search_restaurants(UserPreferences()))
        assert results
        for restaurant in results:
            assert restaurant.name
            assert restaurant.price_level in PRICE_LEVELS

    def test_one_bad_record_does_not_hide_the_rest(self):
        async def fetch(params):
            return [
                {"id": "good", "name": "Good"},
                {"id": "bad", "name": "Bad", "coordinates": {"latitude": 95.0, "longitude": 0}},
                {"id": "worse", "name": 123},
            ]

        results = asyncio.run(search_restaurants(UserPreferences(), fetch=fetch))
        assert [r.id for r in results] == ["good", "bad", "worse"]
        assert results[1].coordinates is None
        assert results[2].name == "Unnamed restaurant"

    def test_none_from_provider_is_no_results(self):
        async def fetch(params):
            return None

        assert asyncio.run(search_restaurants(UserPreferences(), fetch=fetch)) == []


def test_restaurant_details_known_and_unknown():
    detail = asyncio.run(get_restaurant_details("real-1"))
    assert detail is not None
    assert detail.name == "The Local Trattoria"
    assert asyncio.run(get_restaurant_details("real-99")) is None


def test_summarize_results():
    assert summarize_results([]) == (
        "No restaurants found matching your criteria. Try adjusting your preferences."
    )
    results = asyncio.run(search_restaurants(UserPreferences()))
    assert summarize_results(results) == "Found 5 restaurants that match your preferences!"


def test_remember_search_keeps_five_newest():
    history: list[str] = []
    for cuisine in ["A", "B", "C", "D", "E", "F"]:
        history = remember_search(history, UserPreferences(cuisine_type=cuisine))
    assert history == ["F", "E", "D", "C", "B"]
    assert remember_search(history, UserPreferences()) == history


# ── Preference updates ───────────────────────────────────────────────────


class TestPreferenceUpdate:
    def test_only_set_fields_apply(self):
        current = UserPreferences(cuisine_type="Thai", allergies=["Milk"])
        updated = apply_preference_update(current, PreferenceUpdate(price_range="$"))
        assert updated.cuisine_type == "Thai"
        assert updated.allergies == ["Milk"]
        assert updated.price_range == "$"

    def test_lists_replace_by_default(self):
        current = UserPreferences(dietary_restrictions=["Vegan"])
        updated = apply_preference_update(current, {"dietaryRestrictions": ["Halal"]})
        assert updated.dietary_restrictions == ["Halal"]

    def test_lists_merge_without_duplicates(self):
        current = UserPreferences(dietary_restrictions=["Vegan"])
        updated = apply_preference_update(
            current,
            PreferenceUpdate(dietary_restrictions=["Vegan", "Halal"]),
            merge_lists=True,
        )
        assert updated.dietary_restrictions == ["Vegan", "Halal"]

    def test_explicit_null_clears_field(self):
        current = UserPreferences(cuisine_type="Thai")
        updated = apply_preference_update(current, {"cuisineType": None})
        assert updated.cuisine_type is None
