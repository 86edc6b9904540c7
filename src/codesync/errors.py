"""Exception types shared across the scoring pipeline.

Adapter failures are not exceptions here: they travel as failed
``FetchResult`` values so the orchestrator can keep the last known
profile. Only storage failures escape a refresh.
"""

from __future__ import annotations


class CodeSyncError(Exception):
    """Base class for service errors."""


class PersistenceError(CodeSyncError):
    """The document store rejected a write. Fatal for the current call."""


class UnknownPlatformError(CodeSyncError, ValueError):
    """A platform id outside the six supported platforms."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Unknown platform: {platform}")
        self.platform = platform
