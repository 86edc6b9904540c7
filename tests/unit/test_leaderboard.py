"""Leaderboard tests: Redis sorted-set mirror of display scores (mocked Redis)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from codesync.leaderboard.service import (
    LEADERBOARD_KEY,
    get_leaderboard,
    get_student_rank,
    record_display_score,
)
from codesync.scoring.models import StudentScore

pytestmark = pytest.mark.asyncio


def _score(student_id: str, display: int) -> StudentScore:
    now = datetime(2025, 3, 1, tzinfo=timezone.utc)
    return StudentScore(
        student_id=student_id,
        code_sync_score=display / 10,
        display_score=display,
        computed_at=now,
        expires_at=now + timedelta(days=7),
        version=1,
    )


class TestRecordDisplayScore:
    async def test_positive_score_added(self) -> None:
        """A positive display score is written to the sorted set."""
        redis = AsyncMock()
        await record_display_score(redis, _score("s1", 950))
        redis.zadd.assert_awaited_once_with(LEADERBOARD_KEY, {"s1": 950})
        redis.zrem.assert_not_awaited()

    async def test_zero_score_removed(self) -> None:
        """A zero display score removes the student from the board."""
        redis = AsyncMock()
        await record_display_score(redis, _score("s1", 0))
        redis.zrem.assert_awaited_once_with(LEADERBOARD_KEY, "s1")
        redis.zadd.assert_not_awaited()


class TestGetLeaderboard:
    async def test_ranked_entries(self) -> None:
        """Entries are ranked from 1 in descending score order."""
        redis = AsyncMock()
        redis.zrevrange.return_value = [("s1", 950.0), ("s2", 800.0)]
        redis.zcard.return_value = 2

        board = await get_leaderboard(redis, limit=10)

        redis.zrevrange.assert_awaited_once_with(LEADERBOARD_KEY, 0, 9, withscores=True)
        assert board == {
            "entries": [
                {"rank": 1, "student_id": "s1", "display_score": 950},
                {"rank": 2, "student_id": "s2", "display_score": 800},
            ],
            "total": 2,
        }

    async def test_offset_ranks(self) -> None:
        """Ranks continue from the offset."""
        redis = AsyncMock()
        redis.zrevrange.return_value = [("s21", 300.0)]
        redis.zcard.return_value = 21

        board = await get_leaderboard(redis, limit=20, offset=20)

        redis.zrevrange.assert_awaited_once_with(LEADERBOARD_KEY, 20, 39, withscores=True)
        assert board["entries"][0]["rank"] == 21

    async def test_empty(self) -> None:
        """An empty board returns no entries."""
        redis = AsyncMock()
        redis.zrevrange.return_value = []
        redis.zcard.return_value = 0
        assert await get_leaderboard(redis) == {"entries": [], "total": 0}


class TestGetStudentRank:
    async def test_ranked(self) -> None:
        """A ranked student gets a 1-based rank and percentile."""
        redis = AsyncMock()
        redis.zrevrank.return_value = 0
        redis.zscore.return_value = 950.0
        redis.zcard.return_value = 4

        rank = await get_student_rank(redis, "s1")
        assert rank == {"student_id": "s1", "rank": 1, "display_score": 950, "total": 4, "percentile": 75.0}

    async def test_unranked(self) -> None:
        """An unranked student reports rank 0 and score 0."""
        redis = AsyncMock()
        redis.zrevrank.return_value = None
        redis.zscore.return_value = None
        redis.zcard.return_value = 4

        rank = await get_student_rank(redis, "ghost")
        assert rank["rank"] == 0
        assert rank["display_score"] == 0
