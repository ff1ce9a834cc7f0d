from __future__ import annotations

import logging

import httpx

from geo_engine.models import GeoPoint

from playground_search.adapters.base import ClientFactory

logger = logging.getLogger(__name__)

DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"


class NominatimGeocoder:
    """Resolves free text to a point. Any failure reads as "no match"."""

    def __init__(
        self,
        base_url: str = DEFAULT_NOMINATIM_URL,
        country_codes: str = "gb",
        user_agent: str = "PlaygroundExplorer/1.0",
        timeout_seconds: float = 5.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._country_codes = country_codes
        self._user_agent = user_agent
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    def _new_client(self) -> httpx.AsyncClient:
        if self._client_factory is not None:
            return self._client_factory()
        return httpx.AsyncClient(timeout=self._timeout_seconds, headers={"User-Agent": self._user_agent})

    async def geocode(self, query: str) -> GeoPoint | None:
        params = {"format": "json", "q": query, "countrycodes": self._country_codes, "limit": "1"}
        try:
            async with self._new_client() as client:
                response = await client.get(f"{self._base_url}/search", params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "geocode_failed",
                extra={"provider": "nominatim", "reason": exc.__class__.__name__},
            )
            return None
        if not isinstance(payload, list) or not payload:
            logger.info("geocode_no_match", extra={"provider": "nominatim"})
            return None
        first = payload[0]
        point = GeoPoint.parse(first.get("lat"), first.get("lon")) if isinstance(first, dict) else None
        if point is None:
            logger.warning("geocode_unparseable_result", extra={"provider": "nominatim"})
        return point
