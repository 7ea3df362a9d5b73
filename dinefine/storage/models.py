from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..search.models import CamelModel, Restaurant


class ProfileOut(CamelModel):
    user_id: str
    username: str
    phone_number: str | None = None
    dietary_preferences: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)


class ProfileUpdate(CamelModel):
    username: str | None = Field(default=None, min_length=1, max_length=50)
    phone_number: str | None = Field(default=None, max_length=32)
    dietary_preferences: list[str] | None = None
    allergies: list[str] | None = None


class SaveRequest(BaseModel):
    restaurant: Restaurant


class SavedStatus(CamelModel):
    restaurant_id: str
    saved: bool


class SavedRestaurantOut(CamelModel):
    id: str
    restaurant_id: str
    restaurant: Restaurant
    created_at: float


class TagCreate(CamelModel):
    tag_name: str = Field(..., max_length=40)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")


class TagOut(CamelModel):
    id: str
    tag_name: str
    color: str


class RestaurantTagsUpdate(CamelModel):
    tag_ids: list[str] = Field(default_factory=list)


FeedbackType = Literal["bug_report", "feature_request", "ai_quality", "general"]


class AppFeedbackRequest(CamelModel):
    feedback_type: FeedbackType
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    rating: int | None = Field(default=None, ge=1, le=5)
    user_email: str | None = Field(default=None, max_length=254)


class AppFeedbackResponse(BaseModel):
    status: str
    message: str
