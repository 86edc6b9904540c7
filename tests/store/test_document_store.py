"""DocumentStore contract tests, run against both the memory and SQL stores."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from codesync.database import create_tables
from codesync.errors import PersistenceError
from codesync.scoring.models import (
    Badge,
    BadgeLevel,
    CanonicalRecord,
    DifficultyBreakdown,
    Platform,
    PlatformBreakdown,
    ScoreSnapshot,
    StudentScore,
)
from codesync.store.base import DocumentStore
from codesync.store.memory import MemoryDocumentStore
from codesync.store.sql import SqlDocumentStore

from tests.conftest import T0

SID = "student-1"


@pytest_asyncio.fixture(params=["memory", "sql"])
async def any_store(request: pytest.FixtureRequest) -> AsyncGenerator[DocumentStore, None]:
    if request.param == "memory":
        yield MemoryDocumentStore()
        return
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield SqlDocumentStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    await engine.dispose()


def _record(platform: Platform = Platform.LEETCODE, **fields: object) -> CanonicalRecord:
    return CanonicalRecord(platform=platform, handle="alice", fetched_at=T0, **fields)


def _score(display: int = 950, at: timedelta = timedelta()) -> tuple[StudentScore, ScoreSnapshot]:
    now = T0 + at
    skills = {p: 0.0 for p in Platform} | {Platform.LEETCODE: display / 10}
    score = StudentScore(
        student_id=SID,
        code_sync_score=display / 10,
        display_score=display,
        platform_skills=skills,
        total_problems_solved=100,
        breakdown={Platform.LEETCODE: PlatformBreakdown(problems_solved=100, rating=1800.0, contests=20)},
        computed_at=now,
        expires_at=now + timedelta(days=7),
        version=1,
    )
    snapshot = ScoreSnapshot(
        taken_at=now,
        platform_skills=skills,
        code_sync_score=score.code_sync_score,
        display_score=display,
        total_problems_solved=100,
    )
    return score, snapshot


class TestHandles:
    async def test_round_trip(self, any_store: DocumentStore) -> None:
        assert await any_store.get_handles(SID) == {}
        await any_store.set_handles(SID, {Platform.LEETCODE: "alice", Platform.GITHUB: "alice-gh"})
        assert await any_store.get_handles(SID) == {Platform.LEETCODE: "alice", Platform.GITHUB: "alice-gh"}

    async def test_set_replaces(self, any_store: DocumentStore) -> None:
        await any_store.set_handles(SID, {Platform.LEETCODE: "alice"})
        await any_store.set_handles(SID, {Platform.ATCODER: "alice_ac"})
        assert await any_store.get_handles(SID) == {Platform.ATCODER: "alice_ac"}

    async def test_list_students_with_handles(self, any_store: DocumentStore) -> None:
        await any_store.set_handles("b", {Platform.LEETCODE: "x"})
        await any_store.set_handles("a", {Platform.GITHUB: "y"})
        await any_store.set_handles("c", {})
        assert await any_store.list_students_with_handles() == ["a", "b"]


class TestRecords:
    async def test_set_get_overwrite(self, any_store: DocumentStore) -> None:
        assert await any_store.get_record(SID, Platform.LEETCODE) is None

        first = _record(
            problems_solved_by_difficulty=DifficultyBreakdown(easy=1, medium=2, hard=3),
            badges=[Badge(name="50 days", level=BadgeLevel.GOLD)],
        )
        await any_store.set_record(SID, first)
        assert await any_store.get_record(SID, Platform.LEETCODE) == first

        second = _record(rating=2000.0)
        await any_store.set_record(SID, second)
        stored = await any_store.get_record(SID, Platform.LEETCODE)
        assert stored == second
        assert stored is not None
        assert stored.badges == []

    async def test_timezone_preserved(self, any_store: DocumentStore) -> None:
        await any_store.set_record(SID, _record())
        stored = await any_store.get_record(SID, Platform.LEETCODE)
        assert stored is not None
        assert stored.fetched_at == T0
        assert stored.fetched_at is not None
        assert stored.fetched_at.tzinfo is not None

    async def test_list_and_delete(self, any_store: DocumentStore) -> None:
        await any_store.set_record(SID, _record(Platform.LEETCODE))
        await any_store.set_record(SID, _record(Platform.GITHUB, public_repos=4))
        await any_store.set_record("other", _record(Platform.ATCODER))

        records = await any_store.list_records(SID)
        assert {r.platform for r in records} == {Platform.LEETCODE, Platform.GITHUB}

        await any_store.delete_record(SID, Platform.GITHUB)
        await any_store.delete_record(SID, Platform.CODECHEF)  # absent: no-op
        assert [r.platform for r in await any_store.list_records(SID)] == [Platform.LEETCODE]

    async def test_returned_records_are_copies(self, any_store: DocumentStore) -> None:
        await any_store.set_record(SID, _record(rating=1500.0))
        record = await any_store.get_record(SID, Platform.LEETCODE)
        assert record is not None
        record.rating = 9999.0
        stored = await any_store.get_record(SID, Platform.LEETCODE)
        assert stored is not None
        assert stored.rating == 1500.0


class TestScores:
    async def test_save_and_get(self, any_store: DocumentStore) -> None:
        assert await any_store.get_score(SID) is None
        score, snapshot = _score()
        await any_store.save_score(SID, score, snapshot)
        assert await any_store.get_score(SID) == score
        assert await any_store.list_snapshots(SID) == [snapshot]

    async def test_overwrite_score_append_snapshots(self, any_store: DocumentStore) -> None:
        pairs = [_score(display=d, at=timedelta(hours=i)) for i, d in enumerate((500, 700, 600))]
        for score, snapshot in pairs:
            await any_store.save_score(SID, score, snapshot)

        assert await any_store.get_score(SID) == pairs[-1][0]
        snapshots = await any_store.list_snapshots(SID)
        assert [s.display_score for s in snapshots] == [600, 700, 500]
        assert [s.display_score for s in await any_store.list_snapshots(SID, limit=2)] == [600, 700]

    async def test_snapshots_with_same_timestamp_both_kept(self, any_store: DocumentStore) -> None:
        score, snapshot = _score()
        await any_store.save_score(SID, score, snapshot)
        await any_store.save_score(SID, score, snapshot)
        assert len(await any_store.list_snapshots(SID)) == 2


class TestSqlAtomicity:
    async def test_failed_snapshot_rolls_back_score(self, sql_engine: AsyncEngine, sql_store: SqlDocumentStore) -> None:
        async with sql_engine.begin() as conn:
            await conn.execute(text("DROP TABLE score_snapshots"))

        score, snapshot = _score()
        with pytest.raises(PersistenceError, match="save score"):
            await sql_store.save_score(SID, score, snapshot)

        assert await sql_store.get_score(SID) is None
