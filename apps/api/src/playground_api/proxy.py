from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from playground_api.errors import ApiError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


@dataclass(frozen=True)
class UpstreamBinary:
    content: bytes
    media_type: str


class ProviderProxy:
    """GET-only pass-through to provider web services.

    Callers add credentials to ``params``; they are never echoed back in
    errors or logs. One attempt per call.
    """

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
        return httpx.AsyncClient(timeout=self._timeout_seconds, headers=headers, follow_redirects=True)

    async def _get(self, provider: str, url: str, params: dict[str, Any]) -> httpx.Response:
        try:
            async with self._new_client() as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            logger.warning("provider_proxy_timeout", extra={"provider": provider})
            raise ApiError("UPSTREAM_TIMEOUT", "Upstream timeout", 504) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "provider_proxy_failed",
                extra={"provider": provider, "reason": exc.__class__.__name__},
            )
            raise ApiError("UPSTREAM_FAILURE", "Upstream request failed", 502) from exc
        if response.status_code >= 400:
            logger.warning(
                "provider_proxy_http_error",
                extra={"provider": provider, "status_code": response.status_code},
            )
            raise ApiError(
                "UPSTREAM_HTTP_ERROR",
                f"{provider} responded with HTTP {response.status_code}",
                response.status_code,
            )
        logger.info("provider_proxy_completed", extra={"provider": provider, "status_code": response.status_code})
        return response

    async def get_json(self, provider: str, url: str, params: dict[str, Any]) -> Any:
        response = await self._get(provider, url, params)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("UPSTREAM_FAILURE", "Invalid upstream response", 502) from exc

    async def get_binary(self, provider: str, url: str, params: dict[str, Any]) -> UpstreamBinary:
        response = await self._get(provider, url, params)
        media_type = response.headers.get("content-type", "application/octet-stream")
        return UpstreamBinary(content=response.content, media_type=media_type)
