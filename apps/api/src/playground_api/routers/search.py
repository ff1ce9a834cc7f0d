from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from playground_api.dependencies import get_search_service
from playground_api.errors import ApiError
from playground_api.response import success_response
from playground_api.services.search_service import SearchService

router = APIRouter(prefix="/v1/playgrounds", tags=["search"])


@router.get("/search")
async def search_playgrounds(
    query: str | None = Query(default=None, max_length=100),
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius_km: float = Query(default=10.0, gt=0, le=50),
    limit: int | None = Query(default=None, ge=1, le=50),
    service: SearchService = Depends(get_search_service),
) -> dict:
    try:
        data, meta = await service.search(query=query, lat=lat, lng=lng, radius_km=radius_km, limit=limit)
    except ValueError as exc:
        raise ApiError("VALIDATION_ERROR", str(exc), 422) from exc
    return success_response(data, meta=meta)
