"""arq worker for scheduled and admin-triggered score refreshes.

Runs as a separate process:

    arq codesync.workers.settings.WorkerSettings
"""

from __future__ import annotations

import logging
from datetime import timedelta

import httpx
from arq import cron
from arq.connections import RedisSettings

from codesync.adapters.gateway import build_gateway_registry
from codesync.config import get_settings
from codesync.database import close_db, get_session_factory, init_db
from codesync.redis_client import close_redis, init_redis
from codesync.service import ScoringService
from codesync.store.sql import SqlDocumentStore

logger = logging.getLogger(__name__)


async def startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Open DB, Redis and HTTP resources and build the ScoringService."""
    settings = get_settings()
    await init_db(settings)
    redis = await init_redis(settings)

    http_client = httpx.AsyncClient(headers={"User-Agent": f"codesync-worker/{settings.app_version}"})
    ctx["http_client"] = http_client
    ctx["service"] = ScoringService(
        SqlDocumentStore(get_session_factory()),
        build_gateway_registry(settings, http_client),
        ttl=timedelta(days=settings.score_ttl_days),
        chunk_size=settings.batch_chunk_size,
        redis=redis,
    )
    logger.info("Refresh worker started (gateway=%s)", settings.adapter_gateway_url)


async def shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    http_client: httpx.AsyncClient | None = ctx.get("http_client")
    if http_client:
        await http_client.aclose()
    await close_db()
    await close_redis()
    logger.info("Refresh worker shut down")


async def refresh_all_students(ctx: dict) -> dict[str, int]:  # type: ignore[type-arg]
    """Refresh every student with at least one linked handle."""
    service: ScoringService = ctx["service"]
    reports = await service.refresh_students()
    failed = sum(1 for report in reports.values() if report is None)
    logger.info("Scheduled refresh done: %d students, %d failed", len(reports), failed)
    return {"students": len(reports), "failed": failed}


async def recompute_students(ctx: dict, student_ids: list[str]) -> dict[str, int]:  # type: ignore[type-arg]
    """Recompute scores from stored profiles, without fetching."""
    service: ScoringService = ctx["service"]
    scores = await service.recompute_students(student_ids)
    failed = sum(1 for score in scores.values() if score is None)
    logger.info("Batch recompute done: %d students, %d failed", len(scores), failed)
    return {"students": len(scores), "failed": failed}


_settings = get_settings()


class WorkerSettings:
    """arq worker settings for the refresh worker."""

    functions = [refresh_all_students, recompute_students]
    cron_jobs = [
        cron(refresh_all_students, hour=set(_settings.refresh_cron_hours), minute=0, run_at_startup=False),
    ]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(_settings.redis_url)
    max_jobs = 2
    job_timeout = 3600
