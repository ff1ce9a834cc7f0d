from __future__ import annotations

from typing import Any

from geo_engine.models import GeoPoint
from playground_api.observability import SearchMetric, SearchMetricCollector
from playground_search.pipeline import PlaygroundSearchPipeline
from shared.security import validate_search_input

MAX_RADIUS_KM = 50.0


class SearchService:
    def __init__(
        self,
        pipeline: PlaygroundSearchPipeline,
        default_limit: int = 20,
        metrics: SearchMetricCollector | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._default_limit = default_limit
        self._metrics = metrics

    async def search(
        self,
        query: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
        radius_km: float = 10.0,
        limit: int | None = None,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        text = (query or "").strip() or None
        if text is not None and not validate_search_input(text):
            raise ValueError("query contains unsupported characters or is too long")
        if (lat is None) != (lng is None):
            raise ValueError("lat and lng must be given together")
        center = GeoPoint.parse(lat, lng) if lat is not None else None
        if lat is not None and center is None:
            raise ValueError("lat/lng are out of range")
        if text is None and center is None:
            raise ValueError("query or lat/lng is required")
        if not 0 < radius_km <= MAX_RADIUS_KM:
            raise ValueError(f"radius_km must be in (0, {MAX_RADIUS_KM:g}]")

        outcome = await self._pipeline.search(
            query=text,
            center=center,
            radius_km=radius_km,
            limit=limit or self._default_limit,
        )
        if self._metrics is not None:
            self._metrics.observe_search(
                SearchMetric(
                    mode=outcome.mode,
                    result_count=len(outcome.results),
                    source_counts=outcome.source_counts,
                )
            )
        return [record.to_dict() for record in outcome.results], outcome.to_meta()
