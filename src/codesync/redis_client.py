"""Redis client backing the leaderboard sorted set."""

import redis.asyncio as redis

from codesync.config import Settings

_client: redis.Redis | None = None


async def init_redis(settings: Settings) -> redis.Redis:
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.redis_max_connections,
    )
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    if _client is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _client


async def ping_redis() -> None:
    """Raises if Redis is unreachable or not initialized."""
    await get_redis().ping()
