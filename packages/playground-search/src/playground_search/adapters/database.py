from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Protocol

from devkit.db import is_permission_denied_error
from geo_engine.geofence import is_point_inside_radius
from geo_engine.models import GeoPoint

from playground_search.adapters.base import BaseSearchAdapter
from playground_search.models import PlaygroundRecord, PlaygroundSource, unique_amenities

logger = logging.getLogger(__name__)

DEFAULT_ROW_LIMIT = 20
JITTER_DEGREES = 0.01
METERS_PER_DEGREE_LAT = 111_320.0


@dataclass(frozen=True)
class PlaygroundSearchRow:
    id: str
    name: str
    location: str | None = None
    lat: float | None = None
    lng: float | None = None
    opening_hours: str | None = None
    equipment: tuple[str, ...] = field(default_factory=tuple)
    facilities: tuple[str, ...] = field(default_factory=tuple)
    rating_average: float | None = None
    rating_count: int = 0


class PlaygroundRowSource(Protocol):
    async def search_rows(self, text: str, limit: int) -> Sequence[PlaygroundSearchRow]:
        ...

    async def rows_in_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        limit: int,
    ) -> Sequence[PlaygroundSearchRow]:
        ...


def jittered_point(row_id: str, anchor: GeoPoint, spread_degrees: float = JITTER_DEGREES) -> GeoPoint:
    """Stable pseudo-random point near ``anchor``; the same row id always lands in the same place."""
    rng = random.Random(row_id)
    return GeoPoint(
        lat=anchor.lat + rng.uniform(-spread_degrees, spread_degrees),
        lng=anchor.lng + rng.uniform(-spread_degrees, spread_degrees),
    )


def apply_coordinate_fallback(
    records: Sequence[PlaygroundRecord],
    anchor: GeoPoint | None,
) -> list[PlaygroundRecord]:
    """Give located-less records an approximate position, or drop them without an anchor."""
    resolved: list[PlaygroundRecord] = []
    for record in records:
        if record.coordinates is not None:
            resolved.append(record)
        elif anchor is not None:
            resolved.append(
                replace(
                    record,
                    coordinates=jittered_point(record.source_id, anchor),
                    coordinates_approximate=True,
                )
            )
    return resolved


def bounding_box(center: GeoPoint, radius_meters: float) -> tuple[float, float, float, float]:
    lat_delta = radius_meters / METERS_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(center.lat)), 1e-6)
    lng_delta = min(radius_meters / (METERS_PER_DEGREE_LAT * cos_lat), 180.0)
    return center.lat - lat_delta, center.lat + lat_delta, center.lng - lng_delta, center.lng + lng_delta


def row_to_record(row: PlaygroundSearchRow) -> PlaygroundRecord:
    return PlaygroundRecord(
        source=PlaygroundSource.USER_DATABASE,
        source_id=row.id,
        name=row.name,
        coordinates=GeoPoint.parse(row.lat, row.lng) if row.lat is not None and row.lng is not None else None,
        address=row.location,
        city=None,
        opening_hours=row.opening_hours,
        amenities=unique_amenities([*row.equipment, *row.facilities]),
        rating=round(row.rating_average, 2) if row.rating_average is not None else None,
        rating_count=row.rating_count or None,
        photo=None,
    )


class DatabaseSearchAdapter(BaseSearchAdapter):
    provider_name = "database"
    source = PlaygroundSource.USER_DATABASE

    def __init__(
        self,
        rows: PlaygroundRowSource,
        limit: int = DEFAULT_ROW_LIMIT,
        jitter_enabled: bool = True,
    ) -> None:
        self._rows = rows
        self._limit = limit
        self._jitter_enabled = jitter_enabled

    async def search_text(self, query: str, anchor: GeoPoint | None = None) -> list[PlaygroundRecord]:
        return self.resolve_coordinates(await self.fetch_text(query), anchor)

    async def fetch_text(self, query: str) -> list[PlaygroundRecord]:
        """Text matches as stored; rows without a location keep ``coordinates=None``."""
        text = query.strip()
        if not text:
            return []
        try:
            rows = await self._rows.search_rows(text, self._limit)
        except Exception as exc:
            self._log_failure("text", exc)
            return []
        records = [row_to_record(row) for row in rows]
        logger.info(
            "search_adapter_completed",
            extra={
                "provider": self.provider_name,
                "mode": "text",
                "result_count": len(records),
                "unlocated_count": sum(1 for record in records if record.coordinates is None),
            },
        )
        return records

    def resolve_coordinates(
        self,
        records: Sequence[PlaygroundRecord],
        anchor: GeoPoint | None,
    ) -> list[PlaygroundRecord]:
        return apply_coordinate_fallback(records, anchor if self._jitter_enabled else None)

    async def search_nearby(self, center: GeoPoint, radius_meters: float) -> list[PlaygroundRecord]:
        min_lat, max_lat, min_lng, max_lng = bounding_box(center, radius_meters)
        try:
            rows = await self._rows.rows_in_bounds(min_lat, max_lat, min_lng, max_lng, self._limit)
        except Exception as exc:
            self._log_failure("nearby", exc)
            return []
        records = [
            record
            for record in (row_to_record(row) for row in rows)
            if record.coordinates is not None and is_point_inside_radius(center, record.coordinates, radius_meters)
        ]
        logger.info(
            "search_adapter_completed",
            extra={"provider": self.provider_name, "mode": "nearby", "result_count": len(records)},
        )
        return records

    def _log_failure(self, mode: str, exc: Exception) -> None:
        if is_permission_denied_error(exc):
            logger.error(
                "search_adapter_permission_denied",
                extra={"provider": self.provider_name, "mode": mode},
            )
            return
        logger.warning(
            "search_adapter_failed",
            extra={"provider": self.provider_name, "mode": mode, "reason": exc.__class__.__name__},
        )
