"""HTTP adapter for the scraper gateway.

Each platform's scraping lives behind one gateway service exposing
``GET {base_url}/{platform}/{handle}`` and returning the platform's raw stat
object as JSON. This module only transports; parsing is left to
``codesync.scoring.normalize``.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from codesync.adapters.base import AdapterRegistry, FetchResult
from codesync.config import Settings
from codesync.scoring.models import ALL_PLATFORMS, Platform

logger = structlog.get_logger()


class GatewayAdapter:
    """Fetch one platform's raw stats from the scraper gateway."""

    def __init__(
        self,
        platform: Platform,
        client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 20.0,
    ) -> None:
        self.platform = platform
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def url_for(self, handle: str) -> str:
        return f"{self.base_url}/{self.platform.value}/{quote(handle, safe='')}"

    async def fetch(self, handle: str) -> FetchResult:
        url = self.url_for(handle)
        try:
            response = await self.client.get(url, timeout=self.timeout)
        except httpx.TimeoutException:
            return self._failed(handle, "timeout")
        except httpx.HTTPError as exc:
            return self._failed(handle, f"transport error: {exc}")

        if response.status_code == 404:
            return self._failed(handle, "profile not found")
        if not response.is_success:
            return self._failed(handle, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            return self._failed(handle, "response is not JSON")

        if not isinstance(payload, dict):
            return self._failed(handle, "response is not a JSON object")

        return FetchResult.success(payload)

    def _failed(self, handle: str, reason: str) -> FetchResult:
        logger.warning("platform_fetch_failed", platform=self.platform.value, handle=handle, reason=reason)
        return FetchResult.failure(reason)


def build_gateway_registry(settings: Settings, client: httpx.AsyncClient) -> AdapterRegistry:
    """One GatewayAdapter per supported platform, sharing ``client``."""
    return {
        platform: GatewayAdapter(
            platform,
            client,
            settings.adapter_gateway_url,
            timeout=settings.adapter_timeout_seconds,
        )
        for platform in ALL_PLATFORMS
    }
