from __future__ import annotations

import re
import zlib
from collections.abc import Iterable
from dataclasses import replace
from urllib.parse import quote, urlencode

from playground_search.models import PhotoSource, PlaygroundPhoto, PlaygroundRecord

DEFAULT_STOCK_PHOTO_BASE_URL = "https://source.unsplash.com/featured/800x600"
DEFAULT_CONTENT_KEYWORD = "playground"
STOCK_PHOTO_ATTRIBUTION = "Stock photo"

_NON_WORD = re.compile(r"[^a-z0-9]+")


def _name_slug(name: str) -> str:
    return _NON_WORD.sub("-", name.lower()).strip("-")


def stock_photo_url(
    name: str,
    keyword: str = DEFAULT_CONTENT_KEYWORD,
    base_url: str = DEFAULT_STOCK_PHOTO_BASE_URL,
) -> str:
    """Stable placeholder image URL for a playground name.

    The same name always maps to the same ``sig`` so a listing shows the same
    image on every render.
    """
    slug = _name_slug(name) or keyword
    signature = zlib.crc32(slug.encode("utf-8"))
    return f"{base_url.rstrip('/')}/?{quote(keyword)},{quote(slug)}&sig={signature}"


def places_photo_url(photo_reference: str, proxy_path: str = "/api/places/photo", max_width: int = 800) -> str:
    return f"{proxy_path}?{urlencode({'photo_reference': photo_reference, 'maxwidth': max_width})}"


class PhotoAttacher:
    def __init__(
        self,
        base_url: str = DEFAULT_STOCK_PHOTO_BASE_URL,
        keyword: str = DEFAULT_CONTENT_KEYWORD,
    ) -> None:
        self._base_url = base_url
        self._keyword = keyword

    def attach_photo(self, record: PlaygroundRecord) -> PlaygroundRecord:
        if record.photo is not None:
            return record
        photo = PlaygroundPhoto(
            url=stock_photo_url(record.name, self._keyword, self._base_url),
            source=PhotoSource.STOCK,
            attribution=STOCK_PHOTO_ATTRIBUTION,
        )
        return replace(record, photo=photo)

    def attach_photos(self, records: Iterable[PlaygroundRecord]) -> list[PlaygroundRecord]:
        return [self.attach_photo(record) for record in records]
