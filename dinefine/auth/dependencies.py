from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from .session import SessionProvider, get_session_provider


def get_current_user(
    request: Request,
    sessions: SessionProvider = Depends(get_session_provider),
) -> dict | None:
    """Return the user dict from the session, or ``None``."""
    return sessions.current_user(request)


def require_user(
    request: Request,
    sessions: SessionProvider = Depends(get_session_provider),
) -> dict:
    """Raise 401 if no user is logged in."""
    user = sessions.current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(user: dict = Depends(require_user)) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
