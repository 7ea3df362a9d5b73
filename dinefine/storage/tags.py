from __future__ import annotations

from typing import Any

from .rows import get_store

DEFAULT_TAG_COLOR = "#ef4444"


class InvalidTagName(ValueError):
    pass


def list_tags(user_id: str) -> list[dict[str, Any]]:
    rows = get_store().select("user_tags", user_id=user_id)
    return sorted(rows, key=lambda r: r["tag_name"].lower())


def create_tag(user_id: str, tag_name: str, color: str | None = None) -> dict[str, Any]:
    """Create a tag; raises ``InvalidTagName`` or ``UniqueViolation``."""
    name = (tag_name or "").strip()
    if not name:
        raise InvalidTagName("Please enter a tag name")
    return get_store().insert("user_tags", {
        "user_id": user_id,
        "tag_name": name,
        "color": color or DEFAULT_TAG_COLOR,
    })


def delete_tag(user_id: str, tag_id: str) -> bool:
    """Delete a tag and every restaurant link that used it."""
    store = get_store()
    removed = store.delete("user_tags", id=tag_id, user_id=user_id)
    if removed:
        store.delete("restaurant_tags", user_id=user_id, tag_id=tag_id)
    return removed > 0


def get_restaurant_tags(user_id: str, restaurant_id: str) -> list[dict[str, Any]]:
    """Tags the user attached to ``restaurant_id``."""
    store = get_store()
    links = store.select("restaurant_tags", user_id=user_id, restaurant_id=restaurant_id)
    tag_ids = [link["tag_id"] for link in links]
    if not tag_ids:
        return []
    tags = {t["id"]: t for t in store.select("user_tags", user_id=user_id, id=tag_ids)}
    return [tags[tid] for tid in tag_ids if tid in tags]


def set_restaurant_tags(
    user_id: str,
    restaurant_id: str,
    tag_ids: list[str],
) -> list[dict[str, Any]]:
    """Make the restaurant's tag set equal ``tag_ids`` (unknown ids are ignored)."""
    store = get_store()
    owned = {t["id"] for t in store.select("user_tags", user_id=user_id)}
    wanted = [tid for tid in dict.fromkeys(tag_ids) if tid in owned]

    current = {
        link["tag_id"]
        for link in store.select("restaurant_tags", user_id=user_id, restaurant_id=restaurant_id)
    }
    to_remove = current - set(wanted)
    to_add = [tid for tid in wanted if tid not in current]

    if to_remove:
        store.delete(
            "restaurant_tags",
            user_id=user_id,
            restaurant_id=restaurant_id,
            tag_id=to_remove,
        )
    for tid in to_add:
        store.insert("restaurant_tags", {
            "user_id": user_id,
            "restaurant_id": restaurant_id,
            "tag_id": tid,
        })

    return get_restaurant_tags(user_id, restaurant_id)
