from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..search.models import PreferenceUpdate, Restaurant, UserPreferences


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class ChatResponseType(str, Enum):
    results = "results"
    reply = "reply"


class ChatReply(BaseModel):
    """Outcome of one assistant turn before any search runs."""

    message: str
    update: PreferenceUpdate = Field(default_factory=PreferenceUpdate)
    trigger_search: bool = False


class ChatResponse(BaseModel):
    type: ChatResponseType
    message: str
    preferences: UserPreferences
    results: list[Restaurant] | None = None


class ConversationTurn(BaseModel):
    role: str
    content: str


class ConversationState(BaseModel):
    turns: list[ConversationTurn] = Field(default_factory=list)
