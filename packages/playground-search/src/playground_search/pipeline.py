from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, Protocol

from geo_engine.models import GeoPoint

from playground_search.adapters.base import BaseSearchAdapter
from playground_search.adapters.database import DatabaseSearchAdapter
from playground_search.adapters.synthetic import synthetic_playgrounds
from playground_search.merge import DEFAULT_DEDUP_THRESHOLD_DEGREES, merge_results
from playground_search.models import PlaygroundRecord
from playground_search.photos import PhotoAttacher

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 10.0
DEFAULT_RESULT_LIMIT = 20
FALLBACK_RADIUS_KM = 15.0
MIN_EXTERNAL_RESULTS = 3


class Geocoder(Protocol):
    async def geocode(self, query: str) -> GeoPoint | None:
        ...


@dataclass(frozen=True)
class SearchOutcome:
    mode: str
    results: list[PlaygroundRecord]
    reference: GeoPoint | None = None
    reference_source: str | None = None
    source_counts: dict[str, int] = field(default_factory=dict)

    def to_meta(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "count": len(self.results),
            "reference": (
                {"lat": self.reference.lat, "lng": self.reference.lng, "source": self.reference_source}
                if self.reference
                else None
            ),
            "source_counts": dict(self.source_counts),
        }


async def _gather_soft(labels: list[str], calls: list[Awaitable[Any]]) -> list[Any]:
    """Await every call together; a call that raises is logged and read as ``None``."""
    outcomes = await asyncio.gather(*calls, return_exceptions=True)
    settled: list[Any] = []
    for label, outcome in zip(labels, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning(
                "search_source_failed",
                extra={"source_label": label, "reason": outcome.__class__.__name__},
            )
            settled.append(None)
        else:
            settled.append(outcome)
    return settled


class PlaygroundSearchPipeline:
    """Runs every search source for one request and merges what comes back.

    Text mode fans out to the places text search, the database text search and
    the geocoder at once. A thin external answer with a known reference point
    triggers a wider proximity pass. Proximity mode fans out to the places
    nearby search, the map-data area query and the database radius query.
    Sources never fail the request: a raising source contributes nothing.
    """

    def __init__(
        self,
        places: BaseSearchAdapter,
        map_data: BaseSearchAdapter,
        database: DatabaseSearchAdapter,
        geocoder: Geocoder,
        photos: PhotoAttacher | None = None,
        dedup_threshold_degrees: float = DEFAULT_DEDUP_THRESHOLD_DEGREES,
        default_anchor: GeoPoint | None = None,
        synthetic_fallback: bool = False,
        fallback_radius_km: float = FALLBACK_RADIUS_KM,
        min_external_results: int = MIN_EXTERNAL_RESULTS,
    ) -> None:
        self._places = places
        self._map_data = map_data
        self._database = database
        self._geocoder = geocoder
        self._photos = photos or PhotoAttacher()
        self._dedup_threshold_degrees = dedup_threshold_degrees
        self._default_anchor = default_anchor
        self._synthetic_fallback = synthetic_fallback
        self._fallback_radius_km = fallback_radius_km
        self._min_external_results = min_external_results

    async def search(
        self,
        query: str | None = None,
        center: GeoPoint | None = None,
        radius_km: float = DEFAULT_RADIUS_KM,
        limit: int = DEFAULT_RESULT_LIMIT,
    ) -> SearchOutcome:
        text = (query or "").strip()
        if text:
            return await self._search_text(text, center, limit)
        if center is not None:
            return await self._search_nearby(center, radius_km, limit)
        raise ValueError("either query or center is required")

    async def _search_text(self, query: str, center: GeoPoint | None, limit: int) -> SearchOutcome:
        places_text, db_records, geocoded = await _gather_soft(
            ["places_text", "database_text", "geocode"],
            [
                self._places.search_text(query, anchor=center),
                self._database.fetch_text(query),
                self._geocoder.geocode(query),
            ],
        )
        reference = center or geocoded
        reference_source = "device" if center is not None else ("geocode" if geocoded is not None else None)

        external_lists: list[list[PlaygroundRecord]] = [places_text or []]
        map_lists: list[list[PlaygroundRecord]] = []
        if reference is not None and len(places_text or []) < self._min_external_results:
            radius_meters = self._fallback_radius_km * 1000.0
            places_nearby, map_nearby = await _gather_soft(
                ["places_nearby", "map_data_nearby"],
                [
                    self._places.search_nearby(reference, radius_meters),
                    self._map_data.search_nearby(reference, radius_meters),
                ],
            )
            external_lists.append(places_nearby or [])
            map_lists.append(map_nearby or [])
            logger.info(
                "search_proximity_stage_ran",
                extra={"external_count": len(places_text or []), "radius_km": self._fallback_radius_km},
            )

        database_list = self._database.resolve_coordinates(db_records or [], reference or self._default_anchor)
        return self._finish("text", [*external_lists, *map_lists, database_list], reference, reference_source, limit)

    async def _search_nearby(self, center: GeoPoint, radius_km: float, limit: int) -> SearchOutcome:
        radius_meters = radius_km * 1000.0
        places_nearby, map_nearby, db_nearby = await _gather_soft(
            ["places_nearby", "map_data_nearby", "database_nearby"],
            [
                self._places.search_nearby(center, radius_meters),
                self._map_data.search_nearby(center, radius_meters),
                self._database.search_nearby(center, radius_meters),
            ],
        )
        return self._finish(
            "nearby",
            [places_nearby or [], map_nearby or [], db_nearby or []],
            center,
            "device",
            limit,
        )

    def _finish(
        self,
        mode: str,
        result_lists: list[list[PlaygroundRecord]],
        reference: GeoPoint | None,
        reference_source: str | None,
        limit: int,
    ) -> SearchOutcome:
        merged = merge_results(
            result_lists,
            reference=reference,
            threshold_degrees=self._dedup_threshold_degrees,
            limit=limit,
        )
        if not merged and reference is not None and self._synthetic_fallback:
            merged = merge_results([synthetic_playgrounds(reference)], reference=reference, limit=limit)
            logger.info("search_synthetic_fallback_used", extra={"mode": mode})
        results = self._photos.attach_photos(merged)

        source_counts: dict[str, int] = {}
        for record in results:
            source_counts[record.source.value] = source_counts.get(record.source.value, 0) + 1
        logger.info(
            "playground_search_completed",
            extra={
                "mode": mode,
                "result_count": len(results),
                "reference_source": reference_source,
            },
        )
        return SearchOutcome(
            mode=mode,
            results=results,
            reference=reference,
            reference_source=reference_source,
            source_counts=source_counts,
        )
