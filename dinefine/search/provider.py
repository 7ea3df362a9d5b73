from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig

logger = logging.getLogger(__name__)

# Signature of the seam where a real provider (Yelp, Google Places, ...) plugs in.
FetchResults = Callable[[dict[str, str]], Awaitable[list[dict[str, Any]]]]

_mock_results: list[dict[str, Any]] | None = None
_details: dict[str, dict[str, Any]] | None = None


def _load_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def get_mock_results(config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> list[dict[str, Any]]:
    """Return a fresh copy of the bundled provider records, loading them on first call."""
    global _mock_results
    if _mock_results is None:
        _mock_results = _load_json(config.data_dir / "mock_results.json")
    return copy.deepcopy(_mock_results)


def get_detail_catalogue(config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> dict[str, dict[str, Any]]:
    """Return the detailed restaurant records keyed by id."""
    global _details
    if _details is None:
        records = _load_json(config.data_dir / "restaurant_details.json")
        _details = {r["id"]: r for r in records}
    return _details


async def mock_fetch_from_api(
    params: dict[str, str],
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[dict[str, Any]]:
    """Stand-in for the provider call.

    Waits ``config.mock_delay_s`` to simulate the network round trip and
    returns the same five records whatever the parameters are.
    """
    logger.debug("Search provider parameters: %s", params)
    if config.mock_delay_s > 0:
        await asyncio.sleep(config.mock_delay_s)
    return get_mock_results(config)
