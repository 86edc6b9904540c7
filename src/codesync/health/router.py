"""Health, readiness, and version endpoints."""

import asyncio
from collections.abc import Awaitable, Callable

from fastapi import APIRouter

from codesync.config import get_settings
from codesync.database import ping_db
from codesync.redis_client import ping_redis
from codesync.scoring.aggregate import SCORING_VERSION

router = APIRouter()


async def _run_check(check: Callable[[], Awaitable[None]]) -> str:
    try:
        await check()
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness() -> dict[str, object]:
    """Readiness check: the score store and the leaderboard backend.

    Either failing only degrades the service; reads of cached scores and
    refreshes without a leaderboard mirror still work.
    """
    database, redis = await asyncio.gather(_run_check(ping_db), _run_check(ping_redis))
    checks = {"database": database, "redis": redis}
    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, object]:
    """API version, environment and the scoring formula version."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
        "scoring_version": SCORING_VERSION,
    }
