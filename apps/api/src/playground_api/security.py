from __future__ import annotations

from fastapi import Depends, Header

from playground_api.dependencies import get_jwt_manager
from playground_api.errors import ApiError
from playground_api.session import AuthSession, ensure_session
from shared.security import JWTManager


def validate_bearer_token(authorization: str | None, jwt: JWTManager) -> AuthSession | None:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        raise ApiError("UNAUTHORIZED", "Missing bearer token", 401)
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(token)
    except ValueError as exc:
        raise ApiError("UNAUTHORIZED", str(exc), 401) from exc
    return AuthSession(
        user_id=payload.sub,
        email=payload.email,
        role=payload.role,
        session_id=payload.session_id,
    )


async def optional_session(
    authorization: str | None = Header(default=None),
    jwt: JWTManager = Depends(get_jwt_manager),
) -> AuthSession | None:
    return validate_bearer_token(authorization, jwt)


async def require_session(session: AuthSession | None = Depends(optional_session)) -> AuthSession:
    return ensure_session(session)
