from __future__ import annotations

from dataclasses import dataclass

from playground_search.exceptions import AuthorizationError


@dataclass(frozen=True)
class AuthSession:
    """The signed-in user behind one request, resolved from its bearer token."""

    user_id: str
    email: str | None
    role: str
    session_id: str | None = None


def ensure_session(session: AuthSession | None) -> AuthSession:
    if session is None:
        raise AuthorizationError("sign in required")
    return session
