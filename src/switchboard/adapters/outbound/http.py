"""Base class for HTTP-backed provider adapters.

Owns an ``httpx.AsyncClient`` and implements the health check as a timed
GET against a vendor status endpoint.  Subclasses add the domain call
(``process_image`` / ``complete``); vendor payloads live there.
"""

from __future__ import annotations

import time
from typing import Mapping

import httpx
import structlog

from switchboard.ports.outbound import ProviderAdapter
from switchboard.shared.providers.types import HealthStatus, ProviderCapabilities

logger = structlog.get_logger(__name__)


class HttpProviderAdapter(ProviderAdapter):
    """Provider adapter with a pooled HTTP client and a live health check."""

    def __init__(
        self,
        name: str,
        capabilities: ProviderCapabilities,
        *,
        base_url: str,
        health_path: str = "/health",
        api_key: str = "",
        headers: Mapping[str, str] | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._name = name
        self._capabilities = capabilities
        self._api_key = api_key
        self._health_path = health_path
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=dict(headers or {}),
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def capabilities(self) -> ProviderCapabilities:
        return self._capabilities

    @property
    def is_available(self) -> bool:
        # Hosted providers are unusable without credentials; local ones need none.
        return bool(self._api_key.strip()) or not self.requires_internet

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def check_health(self) -> HealthStatus:
        start = time.monotonic()
        try:
            response = await self._client.get(self._health_path)
            elapsed = time.monotonic() - start
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "provider_health_http_error",
                provider=self._name,
                status_code=exc.response.status_code,
            )
            return HealthStatus(
                provider_name=self._name,
                is_healthy=False,
                status=f"HTTP {exc.response.status_code}",
                response_time=time.monotonic() - start,
                error_message=str(exc),
            )
        except httpx.HTTPError as exc:
            logger.warning("provider_health_unreachable", provider=self._name, error=str(exc))
            return HealthStatus(
                provider_name=self._name,
                is_healthy=False,
                status="Unreachable",
                response_time=time.monotonic() - start,
                error_message=f"{type(exc).__name__}: {exc}",
            )

        return HealthStatus(
            provider_name=self._name,
            is_healthy=True,
            status="healthy",
            response_time=elapsed,
        )

    async def close(self) -> None:
        """Close the client if this adapter created it; injected clients stay open."""
        if self._owns_client:
            await self._client.aclose()
