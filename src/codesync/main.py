"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from fastapi import FastAPI

from codesync.adapters.gateway import build_gateway_registry
from codesync.config import get_settings
from codesync.database import close_db, get_session_factory, init_db
from codesync.dependencies import init_service, reset_service
from codesync.health.router import router as health_router
from codesync.leaderboard.router import router as leaderboard_router
from codesync.middleware import setup_middleware
from codesync.redis_client import close_redis, init_redis
from codesync.service import ScoringService
from codesync.store.sql import SqlDocumentStore
from codesync.students.router import router as students_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings)
    redis = await init_redis(settings)

    http_client = httpx.AsyncClient(headers={"User-Agent": f"codesync/{settings.app_version}"})
    init_service(
        ScoringService(
            SqlDocumentStore(get_session_factory()),
            build_gateway_registry(settings, http_client),
            ttl=timedelta(days=settings.score_ttl_days),
            chunk_size=settings.batch_chunk_size,
            redis=redis,
        )
    )

    yield

    reset_service()
    await http_client.aclose()
    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CodeSync Scoring API",
        description="Aggregated competitive-programming reputation scores",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(students_router)
    app.include_router(leaderboard_router)

    return app


app = create_app()
