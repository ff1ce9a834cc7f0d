from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from playground_api.dependencies import get_catalogue_service, get_community_service
from playground_api.errors import ApiError, not_found
from playground_api.response import success_response
from playground_api.schemas.playground import PlaygroundCreateRequest, RatingsSubmitRequest
from playground_api.security import optional_session
from playground_api.services.catalogue_service import CatalogueService
from playground_api.services.community_service import CommunityService
from playground_api.session import AuthSession

router = APIRouter(prefix="/v1/playgrounds", tags=["playgrounds"])


@router.post("", status_code=201)
async def create_playground(
    payload: PlaygroundCreateRequest,
    session: AuthSession | None = Depends(optional_session),
    service: CatalogueService = Depends(get_catalogue_service),
) -> dict:
    try:
        row = await service.create_playground(session, payload)
    except ValueError as exc:
        raise ApiError("VALIDATION_ERROR", str(exc), 422) from exc
    return success_response(asdict(row), meta={})


@router.get("/top")
async def top_rated_playgrounds(
    limit: int = Query(default=10, ge=1, le=50),
    service: CommunityService = Depends(get_community_service),
) -> dict:
    items, has_more = await service.top_rated(limit)
    return success_response(items, meta={"limit": limit, "count": len(items), "has_more": has_more})


@router.get("/{playground_id}")
async def get_playground(
    playground_id: str,
    session: AuthSession | None = Depends(optional_session),
    service: CatalogueService = Depends(get_catalogue_service),
) -> dict:
    try:
        data = await service.get_playground(playground_id, session)
    except LookupError as exc:
        raise not_found("Playground") from exc
    return success_response(data, meta={})


@router.get("/{playground_id}/ratings")
async def get_ratings(
    playground_id: str,
    service: CommunityService = Depends(get_community_service),
) -> dict:
    aggregate = await service.aggregate_ratings(playground_id)
    return success_response(aggregate.to_dict(), meta={})


@router.put("/{playground_id}/ratings")
async def submit_ratings(
    playground_id: str,
    payload: RatingsSubmitRequest,
    session: AuthSession | None = Depends(optional_session),
    service: CommunityService = Depends(get_community_service),
) -> dict:
    try:
        aggregate = await service.submit_ratings(session, playground_id, payload.ratings, payload.review)
    except LookupError as exc:
        raise not_found("Playground") from exc
    except ValueError as exc:
        raise ApiError("VALIDATION_ERROR", str(exc), 422) from exc
    return success_response(aggregate.to_dict(), meta={})


@router.post("/{playground_id}/favorite")
async def toggle_favorite(
    playground_id: str,
    session: AuthSession | None = Depends(optional_session),
    service: CommunityService = Depends(get_community_service),
) -> dict:
    try:
        favorite = await service.toggle_favorite(session, playground_id)
    except LookupError as exc:
        raise not_found("Playground") from exc
    return success_response({"playground_id": playground_id, "is_favorite": favorite}, meta={})
