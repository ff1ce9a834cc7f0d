from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Protocol
from uuid import uuid4

from playground_api.models import PlaygroundRow
from playground_api.schemas.playground import PlaygroundCreateRequest
from playground_api.services.community_service import CommunityService
from playground_api.session import AuthSession, ensure_session
from playground_search.models import unique_amenities
from shared.security import sanitize_html_text

logger = logging.getLogger(__name__)


class PlaygroundStoreLike(Protocol):
    async def create_playground(self, row: PlaygroundRow) -> PlaygroundRow: ...

    async def get_playground(self, playground_id: str) -> PlaygroundRow | None: ...


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return sanitize_html_text(value) or None


class CatalogueService:
    def __init__(self, store: PlaygroundStoreLike, community: CommunityService) -> None:
        self._store = store
        self._community = community

    async def create_playground(self, session: AuthSession | None, payload: PlaygroundCreateRequest) -> PlaygroundRow:
        user = ensure_session(session)
        name = _clean(payload.name)
        if not name:
            raise ValueError("name must not be blank")
        if (payload.lat is None) != (payload.lng is None):
            raise ValueError("lat and lng must be given together")
        row = PlaygroundRow(
            id=str(uuid4()),
            name=name,
            created_by=user.user_id,
            location=_clean(payload.location),
            description=_clean(payload.description),
            age_range=_clean(payload.age_range),
            accessibility=_clean(payload.accessibility),
            opening_hours=_clean(payload.opening_hours),
            equipment=list(unique_amenities([sanitize_html_text(item) for item in payload.equipment])),
            facilities=list(unique_amenities([sanitize_html_text(item) for item in payload.facilities])),
            lat=payload.lat,
            lng=payload.lng,
        )
        created = await self._store.create_playground(row)
        logger.info(
            "playground_created",
            extra={"playground_id": created.id, "user_id": user.user_id, "located": created.lat is not None},
        )
        return created

    async def get_playground(self, playground_id: str, session: AuthSession | None = None) -> dict[str, Any]:
        row = await self._store.get_playground(playground_id)
        if row is None:
            raise LookupError("playground not found")
        ratings = await self._community.aggregate_ratings(playground_id)
        return {
            "playground": asdict(row),
            "ratings": ratings.to_dict(),
            "is_favorite": await self._community.is_favorite(session, playground_id),
        }
