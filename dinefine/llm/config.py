from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    """Settings for rephrasing chat replies with Groq.

    Phrasing is skipped unless ``enabled`` is on and an API key is present;
    ``DINEFINE_LLM_REPLIES=0`` turns it off without removing the key.
    """

    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("DINEFINE_LLM_MODEL", "llama-3.3-70b-versatile")
    timeout: float = float(os.getenv("DINEFINE_LLM_TIMEOUT", "10"))
    # Replies are one or two sentences.
    max_tokens: int = 160
    temperature: float = 0.5
    enabled: bool = os.getenv("DINEFINE_LLM_REPLIES", "1") not in ("0", "false", "False")

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.api_key)


DEFAULT_LLM_CONFIG = LLMConfig()
