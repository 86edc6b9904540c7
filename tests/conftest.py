"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from codesync.adapters.base import FetchResult
from codesync.database import create_tables
from codesync.scoring.models import ALL_PLATFORMS, Platform
from codesync.store.memory import MemoryDocumentStore
from codesync.store.sql import SqlDocumentStore

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

# Raw payloads shaped like the scraper gateway's per-platform output.
RAW_PAYLOADS: dict[Platform, dict[str, Any]] = {
    Platform.LEETCODE: {
        "username": "alice",
        "totalSolved": 100,
        "solvedEasy": 50,
        "solvedMedium": 40,
        "solvedHard": 10,
        "contestRating": 1800,
        "attendedContests": 20,
        "badges": 2,
    },
    Platform.CODEFORCES: {
        "username": "alice_cf",
        "rating": 1500,
        "maxRating": 1600,
        "contestsAttended": 30,
        "problemsSolved": 250,
    },
    Platform.CODECHEF: {
        "username": "alice_cc",
        "currentRating": 1700,
        "highestRating": 1750,
        "stars": 3,
        "fullySolved": {"total": 120},
        "partiallySolved": {"total": 5},
    },
    Platform.ATCODER: {
        "username": "alice_ac",
        "rating": 1200,
        "highestRating": 1300,
        "ratedMatches": 12,
    },
    Platform.HACKERRANK: {
        "username": "alice_hr",
        "fullName": "Alice Example",
        "problemsSolved": 80,
        "badges": [
            {"name": "Problem Solving", "level": 3},
            {"name": "Python", "level": "Silver"},
        ],
        "certificates": [{"name": "SQL (Basic)"}],
        "domains": {"algorithms": 900, "python": 300},
    },
    Platform.GITHUB: {
        "username": "alice-gh",
        "contributionsLastYear": 350,
        "publicRepos": 25,
        "totalStars": 40,
        "followers": 10,
    },
}

ALL_HANDLES: dict[Platform, str] = {p: f"alice-{p.value}" for p in ALL_PLATFORMS}


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class StubAdapter:
    """Adapter returning a canned payload, a failure, or raising."""

    def __init__(
        self,
        platform: Platform,
        payload: Any = None,
        error: str | None = None,
        exc: Exception | None = None,
    ) -> None:
        self.platform = platform
        self.payload = payload
        self.error = error
        self.exc = exc
        self.calls: list[str] = []

    async def fetch(self, handle: str) -> FetchResult:
        self.calls.append(handle)
        if self.exc is not None:
            raise self.exc
        if self.error is not None:
            return FetchResult.failure(self.error)
        return FetchResult.success(self.payload)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def raw_payloads() -> dict[Platform, dict[str, Any]]:
    return {p: dict(payload) for p, payload in RAW_PAYLOADS.items()}


@pytest.fixture
def make_adapters(raw_payloads: dict[Platform, dict[str, Any]]) -> Callable[..., dict[Platform, StubAdapter]]:
    """Build a registry of stub adapters; ``failing`` platforms return failures."""

    def _make(failing: tuple[Platform, ...] = (), **overrides: Any) -> dict[Platform, StubAdapter]:
        adapters = {}
        for platform in ALL_PLATFORMS:
            if platform in failing:
                adapters[platform] = StubAdapter(platform, error="timeout")
            else:
                payload = overrides.get(platform.value, raw_payloads[platform])
                adapters[platform] = StubAdapter(platform, payload=payload)
        return adapters

    return _make


@pytest_asyncio.fixture
async def sql_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_store(sql_engine: AsyncEngine) -> SqlDocumentStore:
    return SqlDocumentStore(async_sessionmaker(sql_engine, class_=AsyncSession, expire_on_commit=False))
