from __future__ import annotations

import functools
import logging

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import Restaurant, UserPreferences
from .normalizer import transform_results
from .params import build_search_params
from .provider import FetchResults, get_detail_catalogue, mock_fetch_from_api

logger = logging.getLogger(__name__)

MAX_PREVIOUS_SEARCHES = 5


async def search_restaurants(
    preferences: UserPreferences,
    fetch: FetchResults | None = None,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[Restaurant]:
    """Search for restaurants matching ``preferences``.

    Builds provider parameters, awaits the provider and normalises what comes
    back. Any failure is logged and reported as an empty list, so callers
    cannot tell "no matches" from "provider down".
    """
    if fetch is None:
        fetch = functools.partial(mock_fetch_from_api, config=config)

    try:
        params = build_search_params(preferences, config)
        raw = await fetch(params)
        return transform_results(raw or [], config)
    except Exception:
        logger.warning("Restaurant search failed, returning no results", exc_info=True)
        return []


async def get_restaurant_details(
    restaurant_id: str,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> Restaurant | None:
    """Return the detailed record for ``restaurant_id``, or ``None``."""
    try:
        record = get_detail_catalogue(config).get(restaurant_id)
        if record is None:
            return None
        return Restaurant.model_validate(record)
    except (OSError, ValueError):
        logger.warning("Failed to load details for restaurant %s", restaurant_id, exc_info=True)
        return None


def summarize_results(results: list[Restaurant]) -> str:
    if results:
        return f"Found {len(results)} restaurants that match your preferences!"
    return "No restaurants found matching your criteria. Try adjusting your preferences."


def remember_search(previous: list[str], preferences: UserPreferences) -> list[str]:
    """Push the searched cuisine onto the recent-searches list (newest first)."""
    if not preferences.cuisine_type:
        return list(previous)
    return [preferences.cuisine_type, *previous][:MAX_PREVIOUS_SEARCHES]
