from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from playground_api.dependencies import get_community_service, get_profile_service
from playground_api.response import success_response
from playground_api.schemas.playground import ProfileUpsertRequest
from playground_api.security import optional_session
from playground_api.services.community_service import CommunityService
from playground_api.services.profile_service import ProfileService
from playground_api.session import AuthSession

router = APIRouter(prefix="/v1/me", tags=["me"])


@router.get("/favorites")
async def list_favorites(
    session: AuthSession | None = Depends(optional_session),
    service: CommunityService = Depends(get_community_service),
) -> dict:
    items = await service.list_favorites(session)
    return success_response(items, meta={"count": len(items)})


@router.put("/profile")
async def upsert_profile(
    payload: ProfileUpsertRequest,
    session: AuthSession | None = Depends(optional_session),
    service: ProfileService = Depends(get_profile_service),
) -> dict:
    profile = await service.upsert_profile(session, name=payload.name, avatar_url=payload.avatar_url)
    return success_response(asdict(profile), meta={})
