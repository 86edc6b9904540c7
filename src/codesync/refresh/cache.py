"""Pull-through score cache with TTL and scoring-version invalidation.

A stored StudentScore is reused while ``now < expires_at`` and its
``version`` matches the running SCORING_VERSION. Otherwise reads may
recompute it from the canonical records currently in the store. Every
recompute overwrites the score and appends one snapshot.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

import structlog

from codesync.refresh.batching import run_in_chunks
from codesync.scoring.aggregate import SCORING_VERSION, SkillDelta, compute_skill_delta, score_records
from codesync.scoring.models import ScoreSnapshot, StudentScore
from codesync.store.base import DocumentStore

logger = structlog.get_logger()

DEFAULT_TTL = timedelta(days=7)

Clock = Callable[[], datetime]
PersistHook = Callable[[StudentScore], Awaitable[None]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScoreCache:
    def __init__(
        self,
        store: DocumentStore,
        *,
        ttl: timedelta = DEFAULT_TTL,
        version: int = SCORING_VERSION,
        clock: Clock | None = None,
        on_persist: PersistHook | None = None,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self.version = version
        self.clock = clock or utcnow
        self.on_persist = on_persist

    def is_stale(self, record: StudentScore, now: datetime | None = None) -> bool:
        """True once the TTL has passed or the record predates the current version."""
        return not record.is_fresh(now or self.clock(), self.version)

    async def get_score(self, student_id: str, recompute_if_expired: bool = True) -> StudentScore | None:
        """Stored score if still valid, else a fresh recompute.

        With ``recompute_if_expired=False`` nothing is ever recomputed: a stale
        record is returned as stored and a missing one as None.
        """
        current = await self.store.get_score(student_id)
        if current is None:
            if not recompute_if_expired:
                return None
            return await self.recompute(student_id)

        if recompute_if_expired and self.is_stale(current):
            logger.info(
                "score_stale",
                student_id=student_id,
                stored_version=current.version,
                expires_at=current.expires_at.isoformat(),
            )
            return await self.recompute(student_id)
        return current

    async def recompute(self, student_id: str) -> StudentScore:
        """Score the student's current canonical records and persist the result."""
        records = await self.store.list_records(student_id)
        result = score_records(records)
        now = self.clock()

        score = StudentScore(
            student_id=student_id,
            code_sync_score=result.code_sync_score,
            display_score=result.display_score,
            platform_skills=result.platform_skills,
            total_problems_solved=result.total_problems_solved,
            breakdown=result.breakdown,
            computed_at=now,
            expires_at=now + self.ttl,
            version=self.version,
        )
        snapshot = ScoreSnapshot(
            taken_at=now,
            platform_skills=score.platform_skills,
            code_sync_score=score.code_sync_score,
            display_score=score.display_score,
            total_problems_solved=score.total_problems_solved,
        )
        await self.store.save_score(student_id, score, snapshot)
        logger.info(
            "score_recomputed",
            student_id=student_id,
            platforms=len(records),
            display_score=score.display_score,
        )

        if self.on_persist is not None:
            try:
                await self.on_persist(score)
            except Exception as exc:
                # The score is already committed; mirrors catch up on the next recompute.
                logger.warning("score_mirror_failed", student_id=student_id, error=str(exc))
        return score

    async def batch_recompute(self, student_ids: list[str], chunk_size: int = 10) -> dict[str, StudentScore | None]:
        return await run_in_chunks(student_ids, chunk_size, self.recompute)

    async def history(self, student_id: str, limit: int | None = None) -> list[ScoreSnapshot]:
        return await self.store.list_snapshots(student_id, limit)

    async def progress(self, student_id: str) -> SkillDelta:
        """Skill gained between the two most recent snapshots."""
        latest = await self.store.list_snapshots(student_id, 2)
        if len(latest) < 2:
            return SkillDelta(per_platform={}, total=0.0)
        current, previous = latest
        return compute_skill_delta(previous.platform_skills, current.platform_skills)
