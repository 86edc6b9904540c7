"""Shared FastAPI dependencies."""

from codesync.service import ScoringService

_service: ScoringService | None = None


def init_service(service: ScoringService) -> None:
    """Install the process-wide ScoringService (called from the app lifespan)."""
    global _service  # noqa: PLW0603
    _service = service


def reset_service() -> None:
    global _service  # noqa: PLW0603
    _service = None


def get_scoring_service() -> ScoringService:
    """Get the ScoringService as a FastAPI dependency."""
    if _service is None:
        msg = "Scoring service not initialized. Call init_service() first."
        raise RuntimeError(msg)
    return _service
