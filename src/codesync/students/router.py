"""Student score endpoints: read, refresh, handles, history."""

from fastapi import APIRouter, Depends, HTTPException, Query

from codesync.dependencies import get_scoring_service
from codesync.service import ScoringService
from codesync.students.schemas import (
    HandlesRequest,
    HandlesResponse,
    PlatformOutcomeResponse,
    ProgressResponse,
    RefreshResponse,
    SnapshotResponse,
    StudentScoreResponse,
)

router = APIRouter(prefix="/api/v1/students", tags=["Students"])


@router.get("/{student_id}/score", response_model=StudentScoreResponse)
async def get_score(
    student_id: str,
    recompute: bool = Query(True, description="Recompute when the cached score is stale or missing"),
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> StudentScoreResponse:
    """Cached score, recomputed on read when expired or computed by an older formula."""
    score = await service.get_score(student_id, recompute_if_expired=recompute)
    if score is None:
        raise HTTPException(status_code=404, detail="No score computed yet")
    return StudentScoreResponse.model_validate(score.model_dump())


async def _refresh(service: ScoringService, student_id: str, platform: str | None) -> RefreshResponse:
    report = await service.refresh_report(student_id, platform)
    return RefreshResponse(
        score=StudentScoreResponse.model_validate(report.score.model_dump()),
        outcomes=[
            PlatformOutcomeResponse(platform=o.platform, status=o.status.value, reason=o.reason)
            for o in report.outcomes
        ],
    )


@router.post("/{student_id}/refresh", response_model=RefreshResponse)
async def refresh_all(
    student_id: str,
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> RefreshResponse:
    """Fetch every linked platform and recompute the score."""
    return await _refresh(service, student_id, None)


@router.post("/{student_id}/refresh/{platform}", response_model=RefreshResponse)
async def refresh_one(
    student_id: str,
    platform: str,
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> RefreshResponse:
    """Fetch a single platform and recompute the score."""
    return await _refresh(service, student_id, platform)


@router.get("/{student_id}/handles", response_model=HandlesResponse)
async def get_handles(
    student_id: str,
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> HandlesResponse:
    handles = await service.get_handles(student_id)
    return HandlesResponse(student_id=student_id, handles=handles)


@router.put("/{student_id}/handles", response_model=HandlesResponse)
async def set_handles(
    student_id: str,
    body: HandlesRequest,
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> HandlesResponse:
    """Replace linked handles. Unlinked platforms are dropped on the next refresh."""
    handles = await service.set_handles(student_id, body.handles)
    return HandlesResponse(student_id=student_id, handles=handles)


@router.get("/{student_id}/history", response_model=list[SnapshotResponse])
async def history(
    student_id: str,
    limit: int = Query(30, ge=1, le=365),
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> list[SnapshotResponse]:
    """Score snapshots, newest first."""
    snapshots = await service.history(student_id, limit)
    return [SnapshotResponse.model_validate(s.model_dump()) for s in snapshots]


@router.get("/{student_id}/progress", response_model=ProgressResponse)
async def progress(
    student_id: str,
    service: ScoringService = Depends(get_scoring_service),  # noqa: B008
) -> ProgressResponse:
    delta = await service.progress(student_id)
    return ProgressResponse(student_id=student_id, per_platform=delta.per_platform, total=delta.total)
