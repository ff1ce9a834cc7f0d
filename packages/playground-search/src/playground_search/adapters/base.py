from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

import httpx

from geo_engine.models import GeoPoint

from playground_search.exceptions import AdapterError, ProviderConfigurationError
from playground_search.models import PlaygroundRecord, PlaygroundSource

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


class BaseSearchAdapter(ABC):
    provider_name: str
    source: PlaygroundSource

    @abstractmethod
    async def search_text(self, query: str, anchor: GeoPoint | None = None) -> list[PlaygroundRecord]:
        raise NotImplementedError

    @abstractmethod
    async def search_nearby(self, center: GeoPoint, radius_meters: float) -> list[PlaygroundRecord]:
        raise NotImplementedError

    async def _fail_soft(
        self,
        mode: str,
        operation: Callable[[], Awaitable[list[PlaygroundRecord]]],
    ) -> list[PlaygroundRecord]:
        started = perf_counter()
        try:
            records = await operation()
        except ProviderConfigurationError as exc:
            logger.warning(
                "search_adapter_not_configured",
                extra={"provider": self.provider_name, "mode": mode, "reason": str(exc)},
            )
            return []
        except AdapterError as exc:
            logger.warning(
                "search_adapter_failed",
                extra={"provider": self.provider_name, "mode": mode, "reason": str(exc)},
            )
            return []
        logger.info(
            "search_adapter_completed",
            extra={
                "provider": self.provider_name,
                "mode": mode,
                "result_count": len(records),
                "duration_ms": round((perf_counter() - started) * 1000.0, 1),
            },
        )
        return records


class HttpSearchAdapter(BaseSearchAdapter):
    """Adapter talking to a JSON web service with one attempt per call."""

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        user_agent: str | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._client_factory = client_factory

    def _new_client(self) -> httpx.AsyncClient:
        if self._client_factory is not None:
            return self._client_factory()
        headers = {"User-Agent": self._user_agent} if self._user_agent else None
        return httpx.AsyncClient(timeout=self._timeout_seconds, headers=headers)

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        try:
            async with self._new_client() as client:
                response = await client.request(method, url, params=params, data=data)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise AdapterError(f"{self.provider_name} request timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise AdapterError(f"{self.provider_name} returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise AdapterError(f"{self.provider_name} request failed: {exc.__class__.__name__}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise AdapterError(f"{self.provider_name} returned invalid JSON") from exc
