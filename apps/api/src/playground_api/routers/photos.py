from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from playground_api.dependencies import get_photo_service
from playground_api.errors import ApiError, not_found
from playground_api.response import success_response
from playground_api.security import optional_session
from playground_api.services.photo_service import PhotoService, PhotoTooLargeError
from playground_api.session import AuthSession, ensure_session

router = APIRouter(tags=["photos"])


def _too_large(max_bytes: int) -> ApiError:
    return ApiError("PAYLOAD_TOO_LARGE", f"photo exceeds {max_bytes} bytes", 413)


async def _read_limited_body(request: Request, max_bytes: int) -> bytes:
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise _too_large(max_bytes)
    # Chunked uploads carry no length; stop reading once past the limit.
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise _too_large(max_bytes)
    return bytes(body)


@router.post("/v1/playgrounds/{playground_id}/photos", status_code=201)
async def upload_photo(
    playground_id: str,
    request: Request,
    session: AuthSession | None = Depends(optional_session),
    service: PhotoService = Depends(get_photo_service),
) -> dict:
    # Raw image body; the media type comes from Content-Type.
    ensure_session(session)
    content = await _read_limited_body(request, service.max_bytes)
    try:
        photo = await service.upload_photo(session, playground_id, content, request.headers.get("content-type"))
    except PhotoTooLargeError as exc:
        raise ApiError("PAYLOAD_TOO_LARGE", str(exc), 413) from exc
    except LookupError as exc:
        raise not_found("Playground") from exc
    except ValueError as exc:
        raise ApiError("VALIDATION_ERROR", str(exc), 422) from exc
    return success_response(asdict(photo), meta={})


@router.get("/v1/playgrounds/{playground_id}/photos")
async def list_photos(
    playground_id: str,
    session: AuthSession | None = Depends(optional_session),
    service: PhotoService = Depends(get_photo_service),
) -> dict:
    photos = await service.list_photos(session, playground_id)
    return success_response([asdict(photo) for photo in photos], meta={"count": len(photos)})


@router.delete("/v1/photos/{photo_id}")
async def delete_photo(
    photo_id: str,
    session: AuthSession | None = Depends(optional_session),
    service: PhotoService = Depends(get_photo_service),
) -> dict:
    try:
        await service.delete_photo(session, photo_id)
    except LookupError as exc:
        raise not_found("Photo") from exc
    return success_response({"photo_id": photo_id, "deleted": True}, meta={})
