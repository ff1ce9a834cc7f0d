from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from geo_engine.models import GeoPoint
from playground_search.adapters.overpass import OverpassAdapter, build_playground_query
from playground_search.models import PlaygroundSource


def _adapter(handler) -> OverpassAdapter:
    transport = httpx.MockTransport(handler)
    return OverpassAdapter(
        base_url="https://overpass.example.com/api/interpreter",
        client_factory=lambda: httpx.AsyncClient(transport=transport, timeout=5.0),
    )


def test_query_covers_nodes_and_ways_with_center_output() -> None:
    query = build_playground_query(GeoPoint(lat=51.5, lng=-0.1), 2000)

    assert 'node["leisure"="playground"](around:2000,51.5,-0.1);' in query
    assert 'way["amenity"="playground"](around:2000,51.5,-0.1);' in query
    assert query.endswith("out center;")


@pytest.mark.asyncio
async def test_nearby_maps_nodes_and_ways() -> None:
    bodies: list[dict[str, list[str]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        bodies.append(parse_qs(request.content.decode()))
        return httpx.Response(
            200,
            json={
                "elements": [
                    {
                        "type": "node",
                        "id": 11,
                        "lat": 51.501,
                        "lon": -0.101,
                        "tags": {"name": "Coram's Fields", "swing": "yes", "slide": "yes"},
                    },
                    {
                        "type": "way",
                        "id": 22,
                        "center": {"lat": 51.502, "lon": -0.102},
                        "tags": {"sandpit": "yes", "climbing_frame": "no"},
                    },
                    {"type": "way", "id": 33, "tags": {"name": "No Geometry"}},
                ]
            },
        )

    records = await _adapter(handler).search_nearby(GeoPoint(lat=51.5, lng=-0.1), 1500)

    assert "data" in bodies[0]
    assert [record.id for record in records] == ["osm-node-11", "osm-way-22"]
    assert records[0].source is PlaygroundSource.MAP_DATA
    assert records[0].amenities == ("Swings", "Slides")
    assert records[1].name == "Playground near 51.5020, -0.1020"
    assert records[1].amenities == ("Sandpit",)


@pytest.mark.asyncio
async def test_failure_yields_empty_list() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="rate limited")

    assert await _adapter(handler).search_nearby(GeoPoint(lat=51.5, lng=-0.1), 1500) == []


@pytest.mark.asyncio
async def test_text_search_is_not_supported() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _adapter(handler).search_text("London") == []
