"""
Session provider.

Owns the signed-in user stored in the request session and tells interested
parties when it changes. Listeners subscribe once (typically at app startup)
and receive every ``SIGNED_IN`` / ``SIGNED_OUT`` event together with the
request and user involved. The provider is resolved through the
``get_session_provider`` dependency so tests and alternative deployments can
swap it via ``app.dependency_overrides``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from fastapi import Request

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"


class AuthEvent(str, Enum):
    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"


AuthListener = Callable[[AuthEvent, Request, dict[str, Any]], None]


class SessionProvider:
    def __init__(self) -> None:
        self._listeners: list[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: AuthEvent, request: Request, user: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, request, user)
            except Exception:
                logger.warning("Auth listener failed on %s", event.value, exc_info=True)

    def current_user(self, request: Request) -> dict[str, Any] | None:
        return request.session.get(SESSION_USER_KEY)

    def sign_in(self, request: Request, user: dict[str, Any]) -> None:
        # A fresh sign-in never inherits another user's session state.
        request.session.clear()
        request.session[SESSION_USER_KEY] = user
        self._notify(AuthEvent.signed_in, request, user)

    def sign_out(self, request: Request) -> None:
        user = request.session.get(SESSION_USER_KEY)
        request.session.clear()
        if user:
            self._notify(AuthEvent.signed_out, request, user)


_default_provider = SessionProvider()


def get_session_provider() -> SessionProvider:
    return _default_provider
