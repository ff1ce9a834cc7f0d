from __future__ import annotations

import logging
from typing import Protocol
from uuid import uuid4

from playground_api.models import PlaygroundRow, UserPhoto
from playground_api.session import AuthSession, ensure_session

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class PhotoTooLargeError(ValueError):
    pass


class PhotoStoreLike(Protocol):
    async def get_playground(self, playground_id: str) -> PlaygroundRow | None: ...

    async def add_photo(self, photo: UserPhoto) -> UserPhoto: ...

    async def get_photo(self, photo_id: str) -> UserPhoto | None: ...

    async def list_photos(self, user_id: str, playground_id: str) -> list[UserPhoto]: ...

    async def delete_photo(self, photo_id: str) -> bool: ...


class ObjectStorageLike(Protocol):
    async def save(self, key: str, content: bytes) -> str: ...

    async def delete(self, key: str) -> bool: ...


class PhotoService:
    """Per-user photo objects. Every read and write is scoped to the caller."""

    def __init__(self, store: PhotoStoreLike, storage: ObjectStorageLike, max_bytes: int = 5 * 1024 * 1024) -> None:
        self._store = store
        self._storage = storage
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    async def upload_photo(
        self,
        session: AuthSession | None,
        playground_id: str,
        content: bytes,
        content_type: str | None,
    ) -> UserPhoto:
        user = ensure_session(session)
        media_type = (content_type or "").split(";", 1)[0].strip().lower()
        extension = ALLOWED_CONTENT_TYPES.get(media_type)
        if extension is None:
            raise ValueError("photo must be image/jpeg, image/png or image/webp")
        if not content:
            raise ValueError("photo body is empty")
        if len(content) > self._max_bytes:
            raise PhotoTooLargeError(f"photo exceeds {self._max_bytes} bytes")
        if await self._store.get_playground(playground_id) is None:
            raise LookupError("playground not found")

        photo_id = str(uuid4())
        key = f"{user.user_id}/{playground_id}/{photo_id}.{extension}"
        public_url = await self._storage.save(key, content)
        photo = await self._store.add_photo(
            UserPhoto(
                id=photo_id,
                user_id=user.user_id,
                playground_id=playground_id,
                storage_key=key,
                public_url=public_url,
                content_type=media_type,
                size_bytes=len(content),
            )
        )
        logger.info(
            "photo_uploaded",
            extra={"user_id": user.user_id, "playground_id": playground_id, "size_bytes": len(content)},
        )
        return photo

    async def list_photos(self, session: AuthSession | None, playground_id: str) -> list[UserPhoto]:
        user = ensure_session(session)
        return await self._store.list_photos(user.user_id, playground_id)

    async def delete_photo(self, session: AuthSession | None, photo_id: str) -> None:
        user = ensure_session(session)
        photo = await self._store.get_photo(photo_id)
        # Someone else's photo reads as missing.
        if photo is None or photo.user_id != user.user_id:
            raise LookupError("photo not found")
        await self._storage.delete(photo.storage_key)
        await self._store.delete_photo(photo_id)
        logger.info("photo_deleted", extra={"user_id": user.user_id, "photo_id": photo_id})
