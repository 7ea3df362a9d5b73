from __future__ import annotations

from collections import Counter
from typing import Any

from .rows import get_store

FEEDBACK_TYPES = ("bug_report", "feature_request", "ai_quality", "general")


def submit_feedback(
    feedback_type: str,
    subject: str,
    message: str,
    user_id: str | None = None,
    rating: int | None = None,
    user_email: str | None = None,
) -> dict[str, Any]:
    return get_store().insert("app_feedback", {
        "user_id": user_id,
        "feedback_type": feedback_type,
        "subject": subject,
        "message": message,
        "rating": rating,
        "user_email": user_email,
    })


def get_feedback() -> list[dict[str, Any]]:
    return get_store().select("app_feedback")


def feedback_stats() -> dict[str, Any]:
    fb = get_feedback()
    ratings = [f["rating"] for f in fb if f.get("rating") is not None]
    by_type = Counter(f["feedback_type"] for f in fb)
    return {
        "total": len(fb),
        "by_type": {t: by_type.get(t, 0) for t in FEEDBACK_TYPES},
        "rated": len(ratings),
        "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0.0,
    }
