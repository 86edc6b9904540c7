"""Student score Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from codesync.scoring.models import Platform, PlatformBreakdown


class StudentScoreResponse(BaseModel):
    """The cached score record as served to clients."""

    student_id: str
    code_sync_score: float
    display_score: int
    platform_skills: dict[Platform, float]
    total_problems_solved: int
    breakdown: dict[Platform, PlatformBreakdown] = {}
    computed_at: datetime
    expires_at: datetime
    version: int


class PlatformOutcomeResponse(BaseModel):
    platform: Platform
    status: str
    reason: str | None = None


class RefreshResponse(BaseModel):
    score: StudentScoreResponse
    outcomes: list[PlatformOutcomeResponse]


class HandlesRequest(BaseModel):
    """Full replacement of a student's linked handles; omitted platforms are unlinked."""

    handles: dict[Platform, str] = Field(default_factory=dict)


class HandlesResponse(BaseModel):
    student_id: str
    handles: dict[Platform, str]


class SnapshotResponse(BaseModel):
    taken_at: datetime
    platform_skills: dict[Platform, float]
    code_sync_score: float
    display_score: int
    total_problems_solved: int


class ProgressResponse(BaseModel):
    """Skill gained since the previous snapshot, per platform and in total."""

    student_id: str
    per_platform: dict[Platform, float]
    total: float
