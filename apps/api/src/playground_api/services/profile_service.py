from __future__ import annotations

import logging
from typing import Protocol

from playground_api.models import UserProfile
from playground_api.session import AuthSession, ensure_session
from shared.security import sanitize_html_text

logger = logging.getLogger(__name__)


class ProfileStoreLike(Protocol):
    async def get_profile(self, user_id: str) -> UserProfile | None: ...

    async def upsert_profile(self, profile: UserProfile) -> UserProfile: ...


def default_display_name(email: str | None) -> str:
    if email and "@" in email:
        local_part = email.split("@", 1)[0].strip()
        if local_part:
            return local_part
    return "User"


class ProfileService:
    def __init__(self, store: ProfileStoreLike) -> None:
        self._store = store

    async def upsert_profile(
        self,
        session: AuthSession | None,
        name: str | None = None,
        avatar_url: str | None = None,
    ) -> UserProfile:
        user = ensure_session(session)
        existing = await self._store.get_profile(user.user_id)
        cleaned_name = sanitize_html_text(name) if name else ""
        if not cleaned_name:
            cleaned_name = existing.name if existing else default_display_name(user.email)
        profile = UserProfile(
            id=user.user_id,
            email=user.email or (existing.email if existing else None),
            name=cleaned_name,
            avatar_url=avatar_url if avatar_url is not None else (existing.avatar_url if existing else None),
        )
        saved = await self._store.upsert_profile(profile)
        logger.info("profile_upserted", extra={"user_id": user.user_id, "is_new": existing is None})
        return saved
