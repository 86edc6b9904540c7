"""Leaderboard endpoints."""

from fastapi import APIRouter, Depends, Query

from codesync.config import get_settings
from codesync.dependencies import get_scoring_service
from codesync.leaderboard.schemas import LeaderboardResponse, StudentRankResponse
from codesync.service import ScoringService

router = APIRouter(prefix="/api/v1/leaderboard", tags=["Leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    limit: int | None = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> dict:
    """Students ranked by display score. Students scoring 0 are not listed."""
    return await service.leaderboard(limit or get_settings().leaderboard_size, offset)


@router.get("/{student_id}", response_model=StudentRankResponse)
async def student_rank(
    student_id: str,
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> dict:
    """One student's position on the leaderboard (rank 0 when unranked)."""
    return await service.rank(student_id)
