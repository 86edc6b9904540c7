"""Refresh orchestration: fetch every linked platform, then rescore.

Per refresh request:

  fetching   one task per platform, run concurrently (at most six)
  merging    re-read all canonical records once every task has finished
  scoring    signals -> skills -> aggregate
  persisting overwrite the score and append a snapshot

A platform fetch that fails leaves that platform's previous record in
place. Only store errors (PersistenceError) abort a refresh.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import structlog

from codesync.adapters.base import AdapterRegistry, fetch_with_adapter
from codesync.refresh.batching import run_in_chunks
from codesync.refresh.cache import Clock, ScoreCache, utcnow
from codesync.scoring.models import ALL_PLATFORMS, Platform, StudentScore, parse_platform
from codesync.scoring.normalize import normalize_record
from codesync.store.base import DocumentStore

logger = structlog.get_logger()


class OutcomeStatus(str, Enum):
    UPDATED = "updated"  # fresh record written
    PRESERVED = "preserved"  # fetch failed, previous record kept
    UNLINKED = "unlinked"  # no handle, previous record removed


@dataclass(frozen=True)
class PlatformOutcome:
    platform: Platform
    status: OutcomeStatus
    reason: str | None = None


@dataclass(frozen=True)
class RefreshReport:
    student_id: str
    score: StudentScore
    outcomes: list[PlatformOutcome] = field(default_factory=list)

    def by_status(self, status: OutcomeStatus) -> list[Platform]:
        return [o.platform for o in self.outcomes if o.status is status]


class RefreshOrchestrator:
    def __init__(
        self,
        store: DocumentStore,
        adapters: AdapterRegistry,
        cache: ScoreCache,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.adapters = adapters
        self.cache = cache
        self.clock = clock or utcnow

    async def refresh_all(self, student_id: str) -> RefreshReport:
        handles = await self.store.get_handles(student_id)
        return await self._refresh(student_id, handles, ALL_PLATFORMS)

    async def refresh_one(self, student_id: str, platform: Platform | str) -> RefreshReport:
        target = parse_platform(platform)
        handles = await self.store.get_handles(student_id)
        return await self._refresh(student_id, handles, (target,))

    async def refresh_many(self, student_ids: Sequence[str], chunk_size: int = 10) -> dict[str, RefreshReport | None]:
        return await run_in_chunks(student_ids, chunk_size, self.refresh_all)

    async def _refresh(
        self,
        student_id: str,
        handles: dict[Platform, str],
        platforms: Sequence[Platform],
    ) -> RefreshReport:
        results = await asyncio.gather(
            *(self._refresh_platform(student_id, p, handles.get(p)) for p in platforms),
            return_exceptions=True,
        )
        # Every task has finished; now surface the first store error, if any.
        for result in results:
            if isinstance(result, BaseException):
                raise result
        outcomes: list[PlatformOutcome] = list(results)  # type: ignore[arg-type]

        score = await self.cache.recompute(student_id)
        logger.info(
            "student_refreshed",
            student_id=student_id,
            updated=sum(o.status is OutcomeStatus.UPDATED for o in outcomes),
            preserved=sum(o.status is OutcomeStatus.PRESERVED for o in outcomes),
            display_score=score.display_score,
        )
        return RefreshReport(student_id=student_id, score=score, outcomes=outcomes)

    async def _refresh_platform(self, student_id: str, platform: Platform, handle: str | None) -> PlatformOutcome:
        if not handle:
            await self.store.delete_record(student_id, platform)
            return PlatformOutcome(platform, OutcomeStatus.UNLINKED)

        adapter = self.adapters.get(platform)
        if adapter is None:
            return self._preserved(student_id, platform, "no adapter configured")

        result = await fetch_with_adapter(adapter, handle)
        if not result.ok:
            return self._preserved(student_id, platform, result.error)

        try:
            record = normalize_record(platform, result.raw, handle=handle, now=self.clock())
        except Exception as exc:
            return self._preserved(student_id, platform, f"normalization failed: {type(exc).__name__}: {exc}")
        if record is None:
            return self._preserved(student_id, platform, "malformed response")

        await self.store.set_record(student_id, record)
        return PlatformOutcome(platform, OutcomeStatus.UPDATED)

    def _preserved(self, student_id: str, platform: Platform, reason: str | None) -> PlatformOutcome:
        logger.warning("platform_refresh_skipped", student_id=student_id, platform=platform.value, reason=reason)
        return PlatformOutcome(platform, OutcomeStatus.PRESERVED, reason)
