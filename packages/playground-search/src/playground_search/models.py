from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from geo_engine.models import GeoPoint


class PlaygroundSource(str, Enum):
    EXTERNAL_PLACES = "external-places"
    USER_DATABASE = "user-database"
    MAP_DATA = "map-data"
    SYNTHETIC_FALLBACK = "synthetic-fallback"

    @property
    def id_tag(self) -> str:
        return _ID_TAGS[self]


_ID_TAGS = {
    PlaygroundSource.EXTERNAL_PLACES: "google",
    PlaygroundSource.USER_DATABASE: "db",
    PlaygroundSource.MAP_DATA: "osm",
    PlaygroundSource.SYNTHETIC_FALLBACK: "mock",
}


class PhotoSource(str, Enum):
    PLACES = "places"
    STOCK = "stock"


@dataclass(frozen=True)
class PlaygroundPhoto:
    url: str
    source: PhotoSource
    attribution: str | None = None


@dataclass(frozen=True)
class PlaygroundRecord:
    source: PlaygroundSource
    source_id: str
    name: str
    coordinates: GeoPoint | None
    address: str | None = None
    city: str | None = None
    opening_hours: str | None = None
    amenities: tuple[str, ...] = field(default_factory=tuple)
    rating: float | None = None
    rating_count: int | None = None
    photo: PlaygroundPhoto | None = None
    coordinates_approximate: bool = False
    distance_km: float | None = None

    @property
    def id(self) -> str:
        return f"{self.source.id_tag}-{self.source_id}"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "source": self.source.value,
            "source_id": self.source_id,
            "name": self.name,
            "lat": self.coordinates.lat if self.coordinates else None,
            "lng": self.coordinates.lng if self.coordinates else None,
            "coordinates_approximate": self.coordinates_approximate,
            "address": self.address,
            "city": self.city,
            "opening_hours": self.opening_hours,
            "amenities": list(self.amenities),
            "rating": self.rating,
            "rating_count": self.rating_count,
            "photo": (
                {
                    "url": self.photo.url,
                    "source": self.photo.source.value,
                    "attribution": self.photo.attribution,
                }
                if self.photo
                else None
            ),
            "distance_km": round(self.distance_km, 3) if self.distance_km is not None else None,
        }


def unique_amenities(values: list[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        tag = value.strip()
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        ordered.append(tag)
    return tuple(ordered)
