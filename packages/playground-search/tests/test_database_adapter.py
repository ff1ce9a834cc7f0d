from __future__ import annotations

import logging
from collections.abc import Sequence

import pytest
from sqlalchemy.exc import ProgrammingError

from geo_engine.models import GeoPoint
from playground_search.adapters.database import (
    DatabaseSearchAdapter,
    PlaygroundSearchRow,
    apply_coordinate_fallback,
    jittered_point,
    row_to_record,
)
from playground_search.models import PlaygroundSource


class FakeRowSource:
    def __init__(self, rows: Sequence[PlaygroundSearchRow]) -> None:
        self.rows = list(rows)
        self.text_calls: list[tuple[str, int]] = []

    async def search_rows(self, text: str, limit: int) -> Sequence[PlaygroundSearchRow]:
        self.text_calls.append((text, limit))
        needle = text.lower()
        matches = [
            row
            for row in self.rows
            if needle in row.name.lower() or needle in (row.location or "").lower()
        ]
        return matches[:limit]

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
            if row.lat is not None
            and row.lng is not None
            and min_lat <= row.lat <= max_lat
            and min_lng <= row.lng <= max_lng
        ][:limit]


class PermissionDenied(Exception):
    sqlstate = "42501"


class FailingRowSource:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def search_rows(self, text: str, limit: int) -> Sequence[PlaygroundSearchRow]:
        raise self.exc

    async def rows_in_bounds(self, *args: float) -> Sequence[PlaygroundSearchRow]:
        raise self.exc


ROWS = [
    PlaygroundSearchRow(id="1", name="Greenwich Adventure Playground", location="Greenwich", lat=51.48, lng=0.0),
    PlaygroundSearchRow(id="2", name="Riverside Play Area", location="Greenwich Riverside"),
    PlaygroundSearchRow(id="3", name="Hyde Park Playground", location="Westminster", lat=51.507, lng=-0.165),
]


@pytest.mark.asyncio
async def test_text_search_matches_name_or_location_with_limit() -> None:
    source = FakeRowSource(ROWS)
    adapter = DatabaseSearchAdapter(source, limit=20)

    records = await adapter.search_text("greenwich", anchor=GeoPoint(lat=51.48, lng=0.0))

    assert source.text_calls == [("greenwich", 20)]
    assert [record.id for record in records] == ["db-1", "db-2"]
    assert records[0].source is PlaygroundSource.USER_DATABASE
    assert not records[0].coordinates_approximate


@pytest.mark.asyncio
async def test_unlocated_rows_are_jittered_around_anchor() -> None:
    anchor = GeoPoint(lat=51.48, lng=0.0)
    adapter = DatabaseSearchAdapter(FakeRowSource(ROWS))

    first = await adapter.search_text("riverside", anchor=anchor)
    second = await adapter.search_text("riverside", anchor=anchor)

    assert len(first) == 1
    record = first[0]
    assert record.coordinates_approximate
    assert record.coordinates is not None
    assert abs(record.coordinates.lat - anchor.lat) <= 0.01
    assert abs(record.coordinates.lng - anchor.lng) <= 0.01
    assert first == second


@pytest.mark.asyncio
async def test_unlocated_rows_are_dropped_when_jitter_disabled() -> None:
    adapter = DatabaseSearchAdapter(FakeRowSource(ROWS), jitter_enabled=False)

    records = await adapter.search_text("riverside", anchor=GeoPoint(lat=51.48, lng=0.0))

    assert records == []


@pytest.mark.asyncio
async def test_unlocated_rows_are_dropped_without_anchor() -> None:
    adapter = DatabaseSearchAdapter(FakeRowSource(ROWS))

    assert await adapter.search_text("riverside") == []


@pytest.mark.asyncio
async def test_nearby_search_keeps_rows_inside_radius() -> None:
    adapter = DatabaseSearchAdapter(FakeRowSource(ROWS))

    records = await adapter.search_nearby(GeoPoint(lat=51.507, lng=-0.16), 2000)

    assert [record.id for record in records] == ["db-3"]


@pytest.mark.asyncio
async def test_errors_yield_empty_list() -> None:
    adapter = DatabaseSearchAdapter(FailingRowSource(RuntimeError("connection refused")))

    assert await adapter.search_text("park") == []
    assert await adapter.search_nearby(GeoPoint(lat=51.5, lng=-0.1), 1000) == []


@pytest.mark.asyncio
async def test_blank_query_skips_row_source() -> None:
    source = FakeRowSource(ROWS)

    assert await DatabaseSearchAdapter(source).search_text("   ") == []
    assert source.text_calls == []


@pytest.mark.asyncio
async def test_permission_denied_logs_distinct_event(caplog: pytest.LogCaptureFixture) -> None:
    denied = ProgrammingError("SELECT", {}, PermissionDenied("permission denied for table playgrounds"))
    adapter = DatabaseSearchAdapter(FailingRowSource(denied))

    with caplog.at_level(logging.WARNING):
        records = await adapter.search_text("park")

    assert records == []
    messages = [record.getMessage() for record in caplog.records]
    assert "search_adapter_permission_denied" in messages
    assert "search_adapter_failed" not in messages


def test_jittered_point_is_deterministic_per_row() -> None:
    anchor = GeoPoint(lat=51.5, lng=-0.1)

    assert jittered_point("row-1", anchor) == jittered_point("row-1", anchor)
    assert jittered_point("row-1", anchor) != jittered_point("row-2", anchor)


def test_coordinate_fallback_keeps_located_records() -> None:
    located = row_to_record(ROWS[0])

    assert apply_coordinate_fallback([located], None) == [located]


def test_row_ratings_flow_into_record() -> None:
    row = PlaygroundSearchRow(
        id="9",
        name="Rated Park",
        lat=51.5,
        lng=-0.1,
        equipment=("Swings", "swings"),
        facilities=("Toilets",),
        rating_average=4.333333,
        rating_count=3,
    )

    record = row_to_record(row)

    assert record.rating == 4.33
    assert record.rating_count == 3
    assert record.amenities == ("Swings", "Toilets")
