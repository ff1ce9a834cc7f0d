from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalPhotoStorage:
    """Object storage on a local or mounted directory, served under ``public_base_url``."""

    def __init__(self, root_dir: str, public_base_url: str) -> None:
        self._root = Path(root_dir).resolve()
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root not in path.parents:
            raise ValueError("storage key escapes the storage root")
        return path

    async def save(self, key: str, content: bytes) -> str:
        path = self._path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await asyncio.to_thread(_write)
        logger.info("photo_object_saved", extra={"storage_key": key, "size_bytes": len(content)})
        return self.public_url(key)

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)

        def _remove() -> bool:
            if not path.exists():
                return False
            path.unlink()
            return True

        removed = await asyncio.to_thread(_remove)
        logger.info("photo_object_deleted", extra={"storage_key": key, "removed": removed})
        return removed
