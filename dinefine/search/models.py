from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PriceLevel = Literal["$", "$$", "$$$", "$$$$"]

PRICE_LEVELS: list[str] = ["$", "$$", "$$$", "$$$$"]


class CamelModel(BaseModel):
    """Accepts both camelCase (browser) and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


def _unique(values: list[str]) -> list[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    return list(dict.fromkeys(cleaned))


class UserPreferences(CamelModel):
    search_query: str | None = None
    cuisine_type: str | None = None
    price_range: PriceLevel | None = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    use_current_location: bool = True
    location: str | None = None
    coordinates: Coordinates | None = None
    radius_meters: int | None = Field(default=None, gt=0)
    open_now: bool = False

    @field_validator("dietary_restrictions", "allergies")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        return _unique(values)


class PreferenceUpdate(CamelModel):
    """A partial :class:`UserPreferences`; only explicitly set fields apply."""

    search_query: str | None = None
    cuisine_type: str | None = None
    price_range: PriceLevel | None = None
    dietary_restrictions: list[str] | None = None
    allergies: list[str] | None = None
    use_current_location: bool | None = None
    location: str | None = None
    coordinates: Coordinates | None = None
    radius_meters: int | None = Field(default=None, gt=0)
    open_now: bool | None = None


def apply_preference_update(
    current: UserPreferences,
    update: UserPreferences | PreferenceUpdate | dict[str, Any],
    merge_lists: bool = False,
) -> UserPreferences:
    """Return ``current`` with the fields set on ``update`` layered on top.

    With ``merge_lists`` the dietary and allergy lists are unioned instead of
    replaced, which is how conversational updates accumulate.
    """
    if isinstance(update, dict):
        update = PreferenceUpdate.model_validate(update)
    changes = update.model_dump(exclude_unset=True)

    data = current.model_dump()
    for key, value in changes.items():
        if merge_lists and key in ("dietary_restrictions", "allergies") and value:
            data[key] = list(data[key]) + list(value)
        elif key in ("dietary_restrictions", "allergies") and value is None:
            data[key] = []
        elif key in ("use_current_location", "open_now") and value is None:
            continue
        else:
            data[key] = value
    return UserPreferences.model_validate(data)


class Restaurant(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    image_url: str
    cuisine_type: str
    rating: float = Field(..., ge=0.0, le=5.0)
    price_level: PriceLevel
    address: str
    distance: str
    dietary_options: list[str] = Field(default_factory=list)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    phone: str | None = None
    website: str | None = None
    hours: list[str] | None = None
    allergy_info: list[str] = Field(default_factory=list)
    coordinates: Coordinates | None = None


class SearchResponse(CamelModel):
    results: list[Restaurant]
    message: str


class QueryRequest(CamelModel):
    query: str = Field(..., min_length=1, max_length=1000)
    search: bool = False


class QueryResponse(CamelModel):
    reply: str
    extracted: UserPreferences | None = None
    preferences: UserPreferences
    results: list[Restaurant] | None = None
    error: str | None = None


class VoiceQueryRequest(CamelModel):
    transcript: str | None = Field(default=None, max_length=1000)
    supported: bool = True
    recognition_error: bool = False
    search: bool = False
