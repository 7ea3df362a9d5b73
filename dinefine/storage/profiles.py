from __future__ import annotations

from typing import Any

from .rows import RowNotFound, get_store


def _unique(values: list[str] | None) -> list[str]:
    return list(dict.fromkeys(v.strip() for v in values or [] if v and v.strip()))


def username_key(username: str) -> str:
    """Usernames are unique regardless of case and surrounding spaces."""
    return username.strip().lower()


def create_profile(
    user_id: str,
    username: str,
    phone_number: str | None = None,
) -> dict[str, Any]:
    return get_store().insert("profiles", {
        "user_id": user_id,
        "username": username.strip(),
        "username_key": username_key(username),
        "phone_number": phone_number,
        "dietary_preferences": [],
        "allergies": [],
    })


def get_profile(user_id: str) -> dict[str, Any] | None:
    return get_store().select_one("profiles", user_id=user_id)


def update_profile(user_id: str, **changes: Any) -> dict[str, Any]:
    """Update profile columns; list columns are deduplicated.

    Raises ``RowNotFound`` when the user has no profile row.
    """
    allowed = {"username", "phone_number", "dietary_preferences", "allergies"}
    values = {k: v for k, v in changes.items() if k in allowed}
    for key in ("dietary_preferences", "allergies"):
        if key in values:
            values[key] = _unique(values[key])
    if values.get("username"):
        values["username"] = values["username"].strip()
        values["username_key"] = username_key(values["username"])
    else:
        values.pop("username", None)
    if not values:
        profile = get_profile(user_id)
        if profile is None:
            raise RowNotFound(f"no profile for {user_id}")
        return profile
    return get_store().update("profiles", values, user_id=user_id)[0]
