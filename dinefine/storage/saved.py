from __future__ import annotations

from typing import Any

from ..search.models import Restaurant
from .rows import get_store


def is_saved(user_id: str, restaurant_id: str) -> bool:
    return get_store().select_one(
        "saved_restaurants", user_id=user_id, restaurant_id=restaurant_id,
    ) is not None


def save_restaurant(user_id: str, restaurant: Restaurant) -> dict[str, Any]:
    """Snapshot ``restaurant`` into the user's saved list."""
    return get_store().insert("saved_restaurants", {
        "user_id": user_id,
        "restaurant_id": restaurant.id,
        "restaurant_data": restaurant.model_dump(by_alias=True),
    })


def unsave_restaurant(user_id: str, restaurant_id: str) -> bool:
    removed = get_store().delete(
        "saved_restaurants", user_id=user_id, restaurant_id=restaurant_id,
    )
    return removed > 0


def toggle_saved(user_id: str, restaurant: Restaurant) -> bool:
    """Flip the saved state and return the new state."""
    if is_saved(user_id, restaurant.id):
        unsave_restaurant(user_id, restaurant.id)
        return False
    save_restaurant(user_id, restaurant)
    return True


def list_saved(user_id: str, tag_id: str | None = None) -> list[dict[str, Any]]:
    """Saved rows for the user, newest first; optionally only those tagged ``tag_id``."""
    store = get_store()
    if tag_id is None:
        rows = store.select("saved_restaurants", user_id=user_id)
    else:
        tagged = {
            r["restaurant_id"]
            for r in store.select("restaurant_tags", user_id=user_id, tag_id=tag_id)
        }
        if not tagged:
            return []
        rows = store.select("saved_restaurants", user_id=user_id, restaurant_id=tagged)
    return sorted(rows, key=lambda r: r["created_at"], reverse=True)
