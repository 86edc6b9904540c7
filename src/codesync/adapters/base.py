"""Adapter contract: fetch(handle) -> FetchResult, never raising."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from codesync.scoring.models import Platform

logger = structlog.get_logger()


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one adapter call: a raw payload or a failure reason."""

    raw: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, raw: Any) -> FetchResult:
        return cls(raw=raw)

    @classmethod
    def failure(cls, reason: str) -> FetchResult:
        return cls(error=reason or "unknown error")


class PlatformAdapter(Protocol):
    platform: Platform

    async def fetch(self, handle: str) -> FetchResult: ...


AdapterRegistry = Mapping[Platform, PlatformAdapter]


async def fetch_with_adapter(adapter: PlatformAdapter, handle: str) -> FetchResult:
    """Call an adapter, turning anything it raises into a failed result."""
    try:
        return await adapter.fetch(handle)
    except Exception as exc:
        logger.warning(
            "adapter_raised",
            platform=adapter.platform.value,
            handle=handle,
            error=str(exc),
            exc_info=exc,
        )
        return FetchResult.failure(f"{type(exc).__name__}: {exc}")
