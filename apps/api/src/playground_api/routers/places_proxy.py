from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from devkit.config import ServiceSettings

from playground_api.dependencies import get_provider_proxy, get_settings
from playground_api.errors import ApiError, configuration_error
from playground_api.proxy import ProviderProxy

router = APIRouter(prefix="/api", tags=["provider-proxy"])

PLACES_SEARCH_TYPES = {"textSearch": "textsearch", "nearbySearch": "nearbysearch"}


def _missing(parameter: str) -> ApiError:
    return ApiError("BAD_REQUEST", f"Missing required parameter: {parameter}", 400)


def _places_key(settings: ServiceSettings) -> str:
    if not settings.GOOGLE_PLACES_API_KEY:
        raise configuration_error()
    return settings.GOOGLE_PLACES_API_KEY


def _places_url(settings: ServiceSettings, path: str) -> str:
    return f"{settings.GOOGLE_PLACES_BASE_URL.rstrip('/')}/{path}"


@router.get("/places/search")
async def places_search(
    search_type: str = Query(default="textSearch", alias="type"),
    query: str | None = Query(default=None),
    location: str | None = Query(default=None),
    radius: int = Query(default=5000, ge=1, le=50000),
    keyword: str = Query(default="playground"),
    settings: ServiceSettings = Depends(get_settings),
    proxy: ProviderProxy = Depends(get_provider_proxy),
) -> Any:
    key = _places_key(settings)
    endpoint = PLACES_SEARCH_TYPES.get(search_type)
    if endpoint is None:
        raise ApiError("BAD_REQUEST", f"Unsupported search type: {search_type}", 400)
    params: dict[str, Any] = {"key": key, "region": settings.PLACES_REGION}
    if endpoint == "textsearch":
        if not query:
            raise _missing("query")
        params["query"] = query
    else:
        if not location:
            raise _missing("location")
        params.update({"location": location, "radius": radius, "keyword": keyword})
    return await proxy.get_json("google_places", _places_url(settings, f"{endpoint}/json"), params)


@router.get("/places/details")
async def places_details(
    place_id: str | None = Query(default=None),
    settings: ServiceSettings = Depends(get_settings),
    proxy: ProviderProxy = Depends(get_provider_proxy),
) -> Any:
    key = _places_key(settings)
    if not place_id:
        raise _missing("place_id")
    params = {"place_id": place_id, "key": key}
    return await proxy.get_json("google_places", _places_url(settings, "details/json"), params)


@router.get("/places/photo")
async def places_photo(
    photo_reference: str | None = Query(default=None),
    maxwidth: int = Query(default=400, ge=1, le=1600),
    settings: ServiceSettings = Depends(get_settings),
    proxy: ProviderProxy = Depends(get_provider_proxy),
) -> Response:
    key = _places_key(settings)
    if not photo_reference:
        raise _missing("photo_reference")
    params = {"photo_reference": photo_reference, "maxwidth": maxwidth, "key": key}
    upstream = await proxy.get_binary("google_places", _places_url(settings, "photo"), params)
    return Response(
        content=upstream.content,
        media_type=upstream.media_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.get("/geocode")
async def geocode(
    q: str | None = Query(default=None),
    countrycodes: str | None = Query(default=None),
    limit: int = Query(default=1, ge=1, le=10),
    settings: ServiceSettings = Depends(get_settings),
    proxy: ProviderProxy = Depends(get_provider_proxy),
) -> Any:
    if not q:
        raise _missing("q")
    params = {
        "q": q,
        "format": "json",
        "countrycodes": countrycodes or settings.GEOCODE_COUNTRY_CODES,
        "limit": limit,
    }
    url = f"{settings.NOMINATIM_BASE_URL.rstrip('/')}/search"
    return await proxy.get_json("nominatim", url, params)
