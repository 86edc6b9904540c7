"""Document store contract used by the refresh and cache layers.

All keys are opaque student ids. Writes overwrite whole documents; there is
no field-level merge. Implementations raise ``PersistenceError`` when a
write cannot be committed.
"""

from __future__ import annotations

from typing import Protocol

from codesync.scoring.models import CanonicalRecord, Platform, ScoreSnapshot, StudentScore


class DocumentStore(Protocol):
    # --- Linked handles ---
    async def get_handles(self, student_id: str) -> dict[Platform, str]: ...

    async def set_handles(self, student_id: str, handles: dict[Platform, str]) -> None: ...

    async def list_students_with_handles(self) -> list[str]: ...

    # --- Canonical records ---
    async def get_record(self, student_id: str, platform: Platform) -> CanonicalRecord | None: ...

    async def list_records(self, student_id: str) -> list[CanonicalRecord]: ...

    async def set_record(self, student_id: str, record: CanonicalRecord) -> None: ...

    async def delete_record(self, student_id: str, platform: Platform) -> None: ...

    # --- Score + snapshots ---
    async def get_score(self, student_id: str) -> StudentScore | None: ...

    async def save_score(self, student_id: str, score: StudentScore, snapshot: ScoreSnapshot) -> None:
        """Overwrite the score and append the snapshot in one commit."""
        ...

    async def list_snapshots(self, student_id: str, limit: int | None = None) -> list[ScoreSnapshot]:
        """Snapshots newest first."""
        ...
