from __future__ import annotations

import re
from typing import Any

from geo_engine.models import GeoPoint

from playground_search.adapters.base import ClientFactory, HttpSearchAdapter
from playground_search.exceptions import AdapterError, ProviderConfigurationError
from playground_search.models import (
    PhotoSource,
    PlaygroundPhoto,
    PlaygroundRecord,
    PlaygroundSource,
    unique_amenities,
)
from playground_search.photos import places_photo_url

DEFAULT_PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
ACCEPTED_STATUSES = frozenset({"OK", "ZERO_RESULTS"})

PLAYGROUND_KEYWORDS = (
    "playground",
    "play area",
    "play ground",
    "children",
    "kids",
    "recreation",
    "park",
    "garden",
    "green",
    "common",
)
EXCLUDED_KEYWORDS = (
    "school",
    "nursery",
    "hotel",
    "restaurant",
    "shop",
    "store",
    "gym",
    "centre",
    "hospital",
    "church",
    "mosque",
    "temple",
)
_UK_POSTCODE = re.compile(r"^[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}$", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]+>")


def is_playground_relevant(name: str) -> bool:
    lowered = name.lower()
    if not any(keyword in lowered for keyword in PLAYGROUND_KEYWORDS):
        return False
    return not any(keyword in lowered for keyword in EXCLUDED_KEYWORDS)


def _place_address(place: dict[str, Any]) -> str:
    return str(place.get("vicinity") or place.get("formatted_address") or "")


def generate_playground_name(place: dict[str, Any]) -> str:
    name = str(place.get("name", "")).strip()
    if name.lower() in {"park", "playground"}:
        location_name = _place_address(place).split(",")[0].strip()
        if location_name:
            name = f"{location_name} {name}"
    lowered = name.lower()
    if "playground" not in lowered and "play area" not in lowered and "park" not in lowered:
        name = f"{name} Playground"
    return name


def extract_city(address: str) -> str | None:
    parts = [part.strip() for part in address.split(",")]
    for part in parts[1:]:
        if part and not _UK_POSTCODE.match(part):
            return part
    return parts[0] or None


def extract_amenities(place: dict[str, Any]) -> tuple[str, ...]:
    amenities: list[str] = []
    types = place.get("types") or []
    if "park" in types:
        amenities.append("Park Setting")
    if "amusement_park" in types:
        amenities.append("Amusement Park")
    rating = place.get("rating")
    if isinstance(rating, (int, float)) and rating >= 4.0:
        amenities.append("Highly Rated")
    name = str(place.get("name", "")).lower()
    for keyword, amenity in (
        ("adventure", "Adventure Equipment"),
        ("water", "Water Play"),
        ("toddler", "Toddler Area"),
        ("climbing", "Climbing Equipment"),
    ):
        if keyword in name:
            amenities.append(amenity)
    return unique_amenities(amenities)


def format_opening_hours(opening_hours: dict[str, Any] | None) -> str | None:
    if not isinstance(opening_hours, dict):
        return None
    weekday_text = opening_hours.get("weekday_text") or []
    return str(weekday_text[0]) if weekday_text else None


class GooglePlacesAdapter(HttpSearchAdapter):
    provider_name = "google_places"
    source = PlaygroundSource.EXTERNAL_PLACES

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_PLACES_BASE_URL,
        region: str = "uk",
        photo_proxy_path: str = "/api/places/photo",
        timeout_seconds: float = 5.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, client_factory=client_factory)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._region = region
        self._photo_proxy_path = photo_proxy_path

    async def search_text(self, query: str, anchor: GeoPoint | None = None) -> list[PlaygroundRecord]:
        params = {"query": f"playground in {query}", "region": self._region}
        return await self._fail_soft("text", lambda: self._search("textsearch", params))

    async def search_nearby(self, center: GeoPoint, radius_meters: float) -> list[PlaygroundRecord]:
        params = {
            "location": f"{center.lat},{center.lng}",
            "radius": str(int(radius_meters)),
            "keyword": "playground",
            "type": "park",
        }
        return await self._fail_soft("nearby", lambda: self._search("nearbysearch", params))

    async def _search(self, endpoint: str, params: dict[str, str]) -> list[PlaygroundRecord]:
        if not self._api_key:
            raise ProviderConfigurationError("places api key is not configured")
        payload = await self._request_json(
            "GET",
            f"{self._base_url}/{endpoint}/json",
            params={**params, "key": self._api_key},
        )
        if not isinstance(payload, dict):
            raise AdapterError("places response is not a JSON object")
        status = payload.get("status")
        if status not in ACCEPTED_STATUSES:
            raise AdapterError(f"places status {status}: {payload.get('error_message', 'unknown error')}")
        results = payload.get("results")
        if not isinstance(results, list):
            return []
        return [
            self._to_record(place)
            for place in results
            if isinstance(place, dict)
            and place.get("place_id")
            and is_playground_relevant(str(place.get("name", "")))
        ]

    def _to_record(self, place: dict[str, Any]) -> PlaygroundRecord:
        geometry = place.get("geometry")
        location = geometry.get("location") if isinstance(geometry, dict) else None
        if not isinstance(location, dict):
            location = {}
        address = _place_address(place)
        rating = place.get("rating")
        rating_count = place.get("user_ratings_total")
        return PlaygroundRecord(
            source=self.source,
            source_id=str(place["place_id"]),
            name=generate_playground_name(place),
            coordinates=GeoPoint.parse(location.get("lat"), location.get("lng")),
            address=address or None,
            city=extract_city(address) if address else None,
            opening_hours=format_opening_hours(place.get("opening_hours")),
            amenities=extract_amenities(place),
            rating=float(rating) if isinstance(rating, (int, float)) else None,
            rating_count=int(rating_count) if isinstance(rating_count, int) else None,
            photo=self._photo(place),
        )

    def _photo(self, place: dict[str, Any]) -> PlaygroundPhoto | None:
        raw_photos = place.get("photos")
        photos = [photo for photo in raw_photos if isinstance(photo, dict)] if isinstance(raw_photos, list) else []
        if not photos or not photos[0].get("photo_reference"):
            return None
        attributions = photos[0].get("html_attributions") or []
        attribution = _HTML_TAG.sub("", str(attributions[0])).strip() if attributions else None
        return PlaygroundPhoto(
            url=places_photo_url(str(photos[0]["photo_reference"]), self._photo_proxy_path),
            source=PhotoSource.PLACES,
            attribution=attribution or None,
        )
