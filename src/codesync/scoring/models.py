"""Canonical platform statistics and persisted score records.

Every platform adapter's output is normalized into a ``CanonicalRecord``
before any scoring happens. All fields except ``platform`` are optional:
a missing field means "unknown", never an error.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from codesync.errors import UnknownPlatformError


class Platform(str, Enum):
    """The six supported external platforms."""

    LEETCODE = "leetcode"
    CODEFORCES = "codeforces"
    CODECHEF = "codechef"
    ATCODER = "atcoder"
    HACKERRANK = "hackerrank"
    GITHUB = "github"


ALL_PLATFORMS: tuple[Platform, ...] = tuple(Platform)


def parse_platform(value: str | Platform) -> Platform:
    """Resolve a platform id, raising UnknownPlatformError for anything else."""
    try:
        return Platform(value)
    except ValueError:
        raise UnknownPlatformError(str(value)) from None


class BadgeLevel(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    LEGENDARY = "legendary"
    UNKNOWN = "unknown"


class Badge(BaseModel):
    name: str = ""
    level: BadgeLevel = BadgeLevel.UNKNOWN


class Certificate(BaseModel):
    name: str = ""


class DifficultyBreakdown(BaseModel):
    """Solved counts split by difficulty label."""

    easy: int | None = None
    medium: int | None = None
    hard: int | None = None

    def is_known(self) -> bool:
        return any(v is not None for v in (self.easy, self.medium, self.hard))

    def total(self) -> int:
        return (self.easy or 0) + (self.medium or 0) + (self.hard or 0)


class CanonicalRecord(BaseModel):
    """Normalized statistics for one (student, platform) pair."""

    platform: Platform

    # Identity (not scored)
    handle: str | None = None
    display_name: str | None = None
    profile_url: str | None = None

    # Problems
    problems_solved_total: int | None = None
    problems_solved_by_difficulty: DifficultyBreakdown | None = None

    # Ratings
    rating: float | None = None
    max_rating: float | None = None
    score: float | None = None

    # Contests
    contests_participated: int | None = None

    # Achievements
    badges: list[Badge] = Field(default_factory=list)
    certificates: list[Certificate] = Field(default_factory=list)
    stars: int | None = None

    # CodeChef
    fully_solved: int | None = None
    partially_solved: int | None = None

    # HackerRank
    domain_scores: dict[str, float] = Field(default_factory=dict)

    # GitHub
    contributions_last_year: int | None = None
    public_repos: int | None = None
    stars_received: int | None = None
    followers: int | None = None

    fetched_at: datetime | None = None


class PlatformBreakdown(BaseModel):
    """Raw headline numbers per platform, kept alongside the score for display."""

    problems_solved: int = 0
    rating: float | None = None
    contests: int | None = None


def empty_skill_map() -> dict[Platform, float]:
    return {platform: 0.0 for platform in ALL_PLATFORMS}


class StudentScore(BaseModel):
    """Cached aggregate score for one student.

    Always written as a whole; ``expires_at`` and ``version`` decide whether
    a read may reuse it.
    """

    student_id: str
    code_sync_score: float = 0.0
    display_score: int = 0
    platform_skills: dict[Platform, float] = Field(default_factory=empty_skill_map)
    total_problems_solved: int = 0
    breakdown: dict[Platform, PlatformBreakdown] = Field(default_factory=dict)
    computed_at: datetime
    expires_at: datetime
    version: int

    def is_fresh(self, now: datetime, version: int) -> bool:
        return now < self.expires_at and self.version == version


class ScoreSnapshot(BaseModel):
    """Immutable history entry written on every recompute."""

    taken_at: datetime
    platform_skills: dict[Platform, float] = Field(default_factory=empty_skill_map)
    code_sync_score: float = 0.0
    display_score: int = 0
    total_problems_solved: int = 0
