from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from geo_engine.models import GeoPoint
from playground_search.adapters.base import BaseSearchAdapter
from playground_search.adapters.database import DatabaseSearchAdapter, PlaygroundSearchRow
from playground_search.models import PhotoSource, PlaygroundRecord, PlaygroundSource
from playground_search.pipeline import PlaygroundSearchPipeline

LONDON = GeoPoint(lat=51.5074, lng=-0.1278)


def _external(source_id: str, name: str, lat: float, lng: float) -> PlaygroundRecord:
    return PlaygroundRecord(
        source=PlaygroundSource.EXTERNAL_PLACES,
        source_id=source_id,
        name=name,
        coordinates=GeoPoint(lat=lat, lng=lng),
    )


class StubAdapter(BaseSearchAdapter):
    provider_name = "stub"
    source = PlaygroundSource.EXTERNAL_PLACES

    def __init__(
        self,
        text: list[PlaygroundRecord] | None = None,
        nearby: list[PlaygroundRecord] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.text = text or []
        self.nearby = nearby or []
        self.error = error
        self.calls: list[str] = []

    async def search_text(self, query: str, anchor: GeoPoint | None = None) -> list[PlaygroundRecord]:
        self.calls.append("text")
        if self.error is not None:
            raise self.error
        return self.text

    async def search_nearby(self, center: GeoPoint, radius_meters: float) -> list[PlaygroundRecord]:
        self.calls.append(f"nearby:{int(radius_meters)}")
        if self.error is not None:
            raise self.error
        return self.nearby


class StubRows:
    def __init__(self, rows: Sequence[PlaygroundSearchRow]) -> None:
        self.rows = list(rows)

    async def search_rows(self, text: str, limit: int) -> Sequence[PlaygroundSearchRow]:
        return [row for row in self.rows if text.lower() in row.name.lower()][:limit]

    async def rows_in_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        limit: int,
    ) -> Sequence[PlaygroundSearchRow]:
        return [
            row
            for row in self.rows
            if row.lat is not None and row.lng is not None and min_lat <= row.lat <= max_lat and min_lng <= row.lng <= max_lng
        ][:limit]


class StubGeocoder:
    def __init__(self, point: GeoPoint | None, started: list[str] | None = None) -> None:
        self.point = point
        self.started = started

    async def geocode(self, query: str) -> GeoPoint | None:
        if self.started is not None:
            self.started.append("geocode")
        await asyncio.sleep(0)
        return self.point


def _pipeline(
    places: BaseSearchAdapter,
    rows: Sequence[PlaygroundSearchRow] = (),
    geocoded: GeoPoint | None = LONDON,
    map_data: BaseSearchAdapter | None = None,
    **kwargs,
) -> PlaygroundSearchPipeline:
    return PlaygroundSearchPipeline(
        places=places,
        map_data=map_data or StubAdapter(),
        database=DatabaseSearchAdapter(StubRows(rows)),
        geocoder=StubGeocoder(geocoded),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_text_search_merges_external_before_database_and_sorts_by_geocoded_point() -> None:
    places = StubAdapter(
        text=[
            _external("far", "Far Park", 51.55, -0.1278),
            _external("near", "Near Park", 51.51, -0.1278),
            _external("dup", "Shared Park", 51.52, -0.1278),
        ]
    )
    rows = [PlaygroundSearchRow(id="7", name="Shared Park", lat=51.5205, lng=-0.1278)]

    outcome = await _pipeline(places, rows).search(query="park")

    assert outcome.mode == "text"
    assert outcome.reference == LONDON
    assert outcome.reference_source == "geocode"
    assert [record.id for record in outcome.results] == ["google-near", "google-dup", "google-far"]
    assert all(record.photo is not None for record in outcome.results)
    assert places.calls == ["text"]


@pytest.mark.asyncio
async def test_device_location_wins_over_geocoded_point() -> None:
    device = GeoPoint(lat=53.48, lng=-2.24)
    places = StubAdapter(text=[_external(str(i), f"Park {i}", 53.48 + i / 100, -2.24) for i in range(3)])

    outcome = await _pipeline(places).search(query="park", center=device)

    assert outcome.reference == device
    assert outcome.reference_source == "device"
    assert outcome.results[0].source_id == "0"


@pytest.mark.asyncio
async def test_failing_external_adapter_leaves_database_results() -> None:
    places = StubAdapter(error=RuntimeError("places exploded"))
    rows = [PlaygroundSearchRow(id="1", name="Community Playground", lat=51.51, lng=-0.12)]

    outcome = await _pipeline(places, rows).search(query="community")

    assert [record.id for record in outcome.results] == ["db-1"]


@pytest.mark.asyncio
async def test_thin_external_results_trigger_proximity_stage() -> None:
    places = StubAdapter(
        text=[_external("t1", "Text Park", 51.52, -0.12)],
        nearby=[_external("n1", "Nearby Park", 51.509, -0.128)],
    )
    map_data = StubAdapter(nearby=[])

    outcome = await _pipeline(places, map_data=map_data).search(query="park")

    assert places.calls == ["text", "nearby:15000"]
    assert map_data.calls == ["nearby:15000"]
    assert [record.id for record in outcome.results] == ["google-n1", "google-t1"]


@pytest.mark.asyncio
async def test_no_reference_point_skips_proximity_stage_and_keeps_order() -> None:
    places = StubAdapter(text=[_external("b", "B Park", 52.0, -1.0), _external("a", "A Park", 51.0, -0.1)])

    outcome = await _pipeline(places, geocoded=None).search(query="park")

    assert places.calls == ["text"]
    assert outcome.reference is None
    assert [record.source_id for record in outcome.results] == ["b", "a"]
    assert all(record.distance_km is None for record in outcome.results)


@pytest.mark.asyncio
async def test_unlocated_database_rows_use_reference_point() -> None:
    places = StubAdapter(text=[_external(str(i), f"Park {i}", 51.5 + i / 100, -0.12) for i in range(3)])
    rows = [PlaygroundSearchRow(id="55", name="Secret Park")]

    outcome = await _pipeline(places, rows).search(query="secret")

    approximate = [record for record in outcome.results if record.coordinates_approximate]
    assert [record.id for record in approximate] == ["db-55"]
    assert approximate[0].coordinates is not None
    assert abs(approximate[0].coordinates.lat - LONDON.lat) <= 0.01


@pytest.mark.asyncio
async def test_unlocated_database_rows_fall_back_to_default_anchor() -> None:
    rows = [PlaygroundSearchRow(id="55", name="Secret Park")]
    anchor = GeoPoint(lat=52.0, lng=-1.0)

    outcome = await _pipeline(StubAdapter(), rows, geocoded=None, default_anchor=anchor).search(query="secret")

    assert [record.id for record in outcome.results] == ["db-55"]


@pytest.mark.asyncio
async def test_proximity_mode_runs_all_nearby_sources() -> None:
    places = StubAdapter(nearby=[_external("p", "Places Park", 51.51, -0.1278)])
    map_data = StubAdapter(
        nearby=[
            PlaygroundRecord(
                source=PlaygroundSource.MAP_DATA,
                source_id="node-1",
                name="Map Park",
                coordinates=GeoPoint(lat=51.508, lng=-0.1278),
            )
        ]
    )
    rows = [PlaygroundSearchRow(id="3", name="Db Park", lat=51.509, lng=-0.1278)]

    outcome = await _pipeline(places, rows, map_data=map_data).search(center=LONDON, radius_km=5)

    assert outcome.mode == "nearby"
    assert places.calls == ["nearby:5000"]
    assert [record.id for record in outcome.results] == ["osm-node-1", "db-3", "google-p"]
    assert outcome.source_counts == {"map-data": 1, "user-database": 1, "external-places": 1}


@pytest.mark.asyncio
async def test_synthetic_fallback_only_when_enabled() -> None:
    disabled = await _pipeline(StubAdapter()).search(center=LONDON)
    enabled = await _pipeline(StubAdapter(), synthetic_fallback=True).search(center=LONDON)

    assert disabled.results == []
    assert len(enabled.results) == 2
    assert {record.source for record in enabled.results} == {PlaygroundSource.SYNTHETIC_FALLBACK}
    assert all(record.photo and record.photo.source is PhotoSource.STOCK for record in enabled.results)


@pytest.mark.asyncio
async def test_text_sources_start_before_any_completes() -> None:
    started: list[str] = []

    class RecordingAdapter(StubAdapter):
        async def search_text(self, query: str, anchor: GeoPoint | None = None) -> list[PlaygroundRecord]:
            started.append("places")
            await asyncio.sleep(0)
            assert "geocode" in started
            return []

    pipeline = PlaygroundSearchPipeline(
        places=RecordingAdapter(),
        map_data=StubAdapter(),
        database=DatabaseSearchAdapter(StubRows([])),
        geocoder=StubGeocoder(None, started),
    )

    outcome = await pipeline.search(query="park")

    assert started == ["places", "geocode"]
    assert outcome.results == []


@pytest.mark.asyncio
async def test_search_requires_query_or_center() -> None:
    with pytest.raises(ValueError):
        await _pipeline(StubAdapter()).search()
