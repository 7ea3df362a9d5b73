from __future__ import annotations

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import phrase_reply
from ..search.models import PreferenceUpdate
from .models import ChatReply, ConversationState, ConversationTurn

GREETING = (
    "Hi there! I'm your DineFineAI assistant. "
    "What kind of restaurant are you looking for today?"
)

_MAX_TURNS = 6  # 3 exchanges

# ---------------------------------------------------------------------------
# Keyword ladder
# ---------------------------------------------------------------------------
# Each rule: (keywords, reply, update). The first rule with a matching keyword
# answers; later rules are not considered.

_RULES: list[tuple[tuple[str, ...], str, dict]] = [
    (
        ("italian", "pasta", "pizza"),
        "Great choice! I'll look for Italian restaurants near you. "
        "Any dietary restrictions I should know about?",
        {"cuisine_type": "Italian"},
    ),
    (
        ("chinese", "asian"),
        "I'll find Chinese restaurants in your area. "
        "Are you allergic to anything I should filter out?",
        {"cuisine_type": "Chinese"},
    ),
    (
        ("mexican", "tacos"),
        "Mexican cuisine it is! Do you prefer casual or more upscale dining?",
        {"cuisine_type": "Mexican"},
    ),
]

_FALLBACK_REPLY = (
    "Could you tell me more about what type of food or restaurant you're "
    "looking for? Or if you have any dietary restrictions?"
)


def _rule_based_reply(message: str) -> ChatReply:
    lower = message.lower()

    for keywords, reply, update in _RULES:
        if any(k in lower for k in keywords):
            return ChatReply(message=reply, update=PreferenceUpdate(**update))

    if "vegetarian" in lower or "vegan" in lower:
        label = "Vegetarian" if "vegetarian" in lower else "Vegan"
        return ChatReply(
            message=(
                "I'll make sure to only show restaurants with vegetarian or "
                "vegan options. Any specific cuisine type you're interested in?"
            ),
            update=PreferenceUpdate(dietary_restrictions=[label]),
        )

    if "gluten" in lower:
        return ChatReply(
            message=(
                "I'll find restaurants with gluten-free options. "
                "Any particular cuisine you're in the mood for today?"
            ),
            update=PreferenceUpdate(dietary_restrictions=["Gluten-Free"]),
        )

    if any(k in lower for k in ("budget", "cheap", "inexpensive")):
        return ChatReply(
            message="Looking for budget-friendly options. Got it! Any food preferences?",
            update=PreferenceUpdate(price_range="$"),
        )

    if any(k in lower for k in ("fancy", "expensive", "fine dining")):
        return ChatReply(
            message="I'll search for upscale dining options in your area. Any cuisine preferences?",
            update=PreferenceUpdate(price_range="$$$"),
        )

    if "search" in lower or "find" in lower:
        return ChatReply(
            message="I'll start searching for restaurants based on your preferences now!",
            trigger_search=True,
        )

    return ChatReply(message=_FALLBACK_REPLY)


def chat_reply(message: str, config: LLMConfig = DEFAULT_LLM_CONFIG) -> ChatReply:
    """Answer one chat message.

    The keyword ladder decides the preference update and whether to search.
    When an LLM is configured it may rephrase the reply text; search
    confirmations always keep the fixed wording.
    """
    reply = _rule_based_reply(message)
    if reply.trigger_search:
        return reply

    understood = reply.update.model_dump(exclude_unset=True, by_alias=True)
    phrased = phrase_reply(message, understood, config=config)
    if phrased:
        reply = reply.model_copy(update={"message": phrased})
    return reply


def update_conversation_state(
    state: ConversationState,
    user_message: str,
    assistant_message: str,
) -> ConversationState:
    turns = list(state.turns)
    turns.append(ConversationTurn(role="user", content=user_message))
    turns.append(ConversationTurn(role="assistant", content=assistant_message))

    # Keep only last _MAX_TURNS messages
    if len(turns) > _MAX_TURNS:
        turns = turns[-_MAX_TURNS:]

    return ConversationState(turns=turns)
