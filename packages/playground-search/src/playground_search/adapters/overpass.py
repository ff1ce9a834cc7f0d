from __future__ import annotations

from typing import Any

from geo_engine.models import GeoPoint

from playground_search.adapters.base import ClientFactory, HttpSearchAdapter
from playground_search.exceptions import AdapterError
from playground_search.models import PlaygroundRecord, PlaygroundSource, unique_amenities

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"

_EQUIPMENT_TAGS = (
    ("swing", "Swings"),
    ("slide", "Slides"),
    ("climbing_frame", "Climbing Frame"),
    ("sandpit", "Sandpit"),
)


def build_playground_query(center: GeoPoint, radius_meters: float, timeout_seconds: int = 25) -> str:
    around = f"around:{int(radius_meters)},{center.lat},{center.lng}"
    return (
        f"[out:json][timeout:{timeout_seconds}];"
        "("
        f'node["leisure"="playground"]({around});'
        f'way["leisure"="playground"]({around});'
        f'node["amenity"="playground"]({around});'
        f'way["amenity"="playground"]({around});'
        ");"
        "out center;"
    )


def element_coordinates(element: dict[str, Any]) -> GeoPoint | None:
    if "lat" in element and "lon" in element:
        return GeoPoint.parse(element.get("lat"), element.get("lon"))
    center = element.get("center") or {}
    return GeoPoint.parse(center.get("lat"), center.get("lon"))


def element_amenities(tags: dict[str, Any]) -> tuple[str, ...]:
    amenities = [label for tag, label in _EQUIPMENT_TAGS if tags.get(tag) not in (None, "no")]
    if tags.get("wheelchair") == "yes":
        amenities.append("Wheelchair Accessible")
    return unique_amenities(amenities)


class OverpassAdapter(HttpSearchAdapter):
    """Map-data adapter; Overpass only answers area queries."""

    provider_name = "overpass"
    source = PlaygroundSource.MAP_DATA

    def __init__(
        self,
        base_url: str = DEFAULT_OVERPASS_URL,
        timeout_seconds: float = 5.0,
        user_agent: str | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, user_agent=user_agent, client_factory=client_factory)
        self._base_url = base_url

    async def search_text(self, query: str, anchor: GeoPoint | None = None) -> list[PlaygroundRecord]:
        return []

    async def search_nearby(self, center: GeoPoint, radius_meters: float) -> list[PlaygroundRecord]:
        return await self._fail_soft("nearby", lambda: self._query(center, radius_meters))

    async def _query(self, center: GeoPoint, radius_meters: float) -> list[PlaygroundRecord]:
        payload = await self._request_json(
            "POST",
            self._base_url,
            data={"data": build_playground_query(center, radius_meters)},
        )
        if not isinstance(payload, dict):
            raise AdapterError("overpass returned an unexpected payload")
        records: list[PlaygroundRecord] = []
        for element in payload.get("elements") or []:
            record = self._to_record(element)
            if record is not None:
                records.append(record)
        return records

    def _to_record(self, element: dict[str, Any]) -> PlaygroundRecord | None:
        if "id" not in element or "type" not in element:
            return None
        coordinates = element_coordinates(element)
        if coordinates is None:
            return None
        tags = element.get("tags") or {}
        name = str(tags.get("name") or "").strip()
        if not name:
            name = f"Playground near {coordinates.lat:.4f}, {coordinates.lng:.4f}"
        return PlaygroundRecord(
            source=self.source,
            source_id=f"{element['type']}-{element['id']}",
            name=name,
            coordinates=coordinates,
            address=tags.get("addr:street"),
            city=tags.get("addr:city"),
            opening_hours=tags.get("opening_hours"),
            amenities=element_amenities(tags),
            rating=None,
            rating_count=None,
            photo=None,
        )
