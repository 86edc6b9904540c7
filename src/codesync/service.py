"""ScoringService: the one object the HTTP layer and workers talk to.

Built once at process start and passed around by reference; it owns the
score cache, the refresh orchestrator and the optional Redis leaderboard.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta

from redis.asyncio import Redis

from codesync.adapters.base import AdapterRegistry
from codesync.leaderboard.service import get_leaderboard, get_student_rank, record_display_score
from codesync.refresh.cache import DEFAULT_TTL, Clock, ScoreCache
from codesync.refresh.orchestrator import RefreshOrchestrator, RefreshReport
from codesync.scoring.aggregate import SkillDelta
from codesync.scoring.models import Platform, ScoreSnapshot, StudentScore
from codesync.store.base import DocumentStore


class ScoringService:
    def __init__(
        self,
        store: DocumentStore,
        adapters: AdapterRegistry,
        *,
        ttl: timedelta = DEFAULT_TTL,
        chunk_size: int = 10,
        redis: Redis | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.redis = redis
        self.chunk_size = chunk_size
        self.cache = ScoreCache(
            store,
            ttl=ttl,
            clock=clock,
            on_persist=self._mirror_score if redis is not None else None,
        )
        self.orchestrator = RefreshOrchestrator(store, adapters, self.cache, clock=clock)

    async def _mirror_score(self, score: StudentScore) -> None:
        await record_display_score(self._require_redis(), score)

    # --- Refresh ---

    async def refresh_all(self, student_id: str) -> StudentScore:
        report = await self.orchestrator.refresh_all(student_id)
        return report.score

    async def refresh_one(self, student_id: str, platform: Platform | str) -> StudentScore:
        report = await self.orchestrator.refresh_one(student_id, platform)
        return report.score

    async def refresh_report(self, student_id: str, platform: Platform | str | None = None) -> RefreshReport:
        """Like refresh_all/refresh_one, with per-platform outcomes."""
        if platform is None:
            return await self.orchestrator.refresh_all(student_id)
        return await self.orchestrator.refresh_one(student_id, platform)

    async def refresh_students(self, student_ids: Sequence[str] | None = None) -> dict[str, RefreshReport | None]:
        """Refresh many students; defaults to everyone with a linked handle."""
        if student_ids is None:
            student_ids = await self.store.list_students_with_handles()
        return await self.orchestrator.refresh_many(student_ids, self.chunk_size)

    # --- Reads ---

    async def get_score(self, student_id: str, recompute_if_expired: bool = True) -> StudentScore | None:
        return await self.cache.get_score(student_id, recompute_if_expired)

    async def recompute_students(self, student_ids: Sequence[str]) -> dict[str, StudentScore | None]:
        return await self.cache.batch_recompute(list(student_ids), self.chunk_size)

    async def history(self, student_id: str, limit: int | None = None) -> list[ScoreSnapshot]:
        return await self.cache.history(student_id, limit)

    async def progress(self, student_id: str) -> SkillDelta:
        return await self.cache.progress(student_id)

    # --- Handles ---

    async def get_handles(self, student_id: str) -> dict[Platform, str]:
        return await self.store.get_handles(student_id)

    async def set_handles(self, student_id: str, handles: dict[Platform, str]) -> dict[Platform, str]:
        """Replace the student's linked handles. Takes effect on the next refresh."""
        cleaned = {p: h.strip() for p, h in handles.items() if h and h.strip()}
        await self.store.set_handles(student_id, cleaned)
        return cleaned

    # --- Leaderboard ---

    def _require_redis(self) -> Redis:
        if self.redis is None:
            msg = "Leaderboard requires Redis"
            raise RuntimeError(msg)
        return self.redis

    async def leaderboard(self, limit: int = 50, offset: int = 0) -> dict:
        return await get_leaderboard(self._require_redis(), limit, offset)

    async def rank(self, student_id: str) -> dict:
        return await get_student_rank(self._require_redis(), student_id)
