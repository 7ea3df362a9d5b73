from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are DineFineAI, a friendly restaurant-finding assistant. "
    "You are given the user's latest message and the dining preferences "
    "already understood from it. Reply in one or two short sentences "
    "(under 40 words): acknowledge what you understood and, if something "
    "useful is still missing (cuisine, dietary needs, allergies, budget), "
    "ask about one of those. Never invent restaurant names. "
    "Do not use bullet points."
)


def _build_user_message(message: str, understood: dict[str, Any]) -> str:
    lines = [f"User message: {message}"]
    if understood:
        lines.append(f"Understood preferences: {json.dumps(understood, sort_keys=True)}")
    else:
        lines.append("Understood preferences: none")
    return "\n".join(lines)


def phrase_reply(
    message: str,
    understood: dict[str, Any],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str | None:
    """
    Ask Groq to phrase the assistant's reply.

    Returns ``None`` on any failure (disabled, timeout, API error, empty text),
    in which case the caller keeps its rule-based reply.
    """
    if not config.active:
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_message(message, understood)},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )
        text = (response.choices[0].message.content or "").strip()
        return text or None

    except Exception:
        logger.warning("Groq reply generation failed, using rule-based reply", exc_info=True)
        return None
