"""Display-score leaderboard on a Redis sorted set.

The SQL/document store stays the source of truth; the sorted set is a
mirror updated after every persisted score and read for rankings.
"""

from __future__ import annotations

from redis.asyncio import Redis

from codesync.scoring.models import StudentScore

LEADERBOARD_KEY = "leaderboard:display"


async def record_display_score(redis: Redis, score: StudentScore) -> None:
    """Mirror one student's display score. Students at 0 are not ranked."""
    if score.display_score > 0:
        await redis.zadd(LEADERBOARD_KEY, {score.student_id: score.display_score})
    else:
        await redis.zrem(LEADERBOARD_KEY, score.student_id)


async def get_leaderboard(redis: Redis, limit: int = 50, offset: int = 0) -> dict:
    """Top students by display score, highest first."""
    entries = await redis.zrevrange(LEADERBOARD_KEY, offset, offset + limit - 1, withscores=True)
    total = await redis.zcard(LEADERBOARD_KEY)

    results = [
        {
            "rank": offset + position + 1,
            "student_id": student_id,
            "display_score": int(score),
        }
        for position, (student_id, score) in enumerate(entries)
    ]
    return {"entries": results, "total": total}


async def get_student_rank(redis: Redis, student_id: str) -> dict:
    """A single student's rank and display score."""
    rank = await redis.zrevrank(LEADERBOARD_KEY, student_id)
    score = await redis.zscore(LEADERBOARD_KEY, student_id)
    total = await redis.zcard(LEADERBOARD_KEY)

    if rank is None:
        return {"student_id": student_id, "rank": 0, "display_score": 0, "total": total, "percentile": 0}

    return {
        "student_id": student_id,
        "rank": rank + 1,
        "display_score": int(score),
        "total": total,
        "percentile": round(100 - ((rank + 1) / total * 100), 2) if total > 0 else 0,
    }
