"""In-process DocumentStore for tests and local runs."""

from __future__ import annotations

from codesync.scoring.models import CanonicalRecord, Platform, ScoreSnapshot, StudentScore


class MemoryDocumentStore:
    """Dict-backed store. Returns copies so callers cannot mutate stored state."""

    def __init__(self) -> None:
        self.handles: dict[str, dict[Platform, str]] = {}
        self.records: dict[str, dict[Platform, CanonicalRecord]] = {}
        self.scores: dict[str, StudentScore] = {}
        self.snapshots: dict[str, list[ScoreSnapshot]] = {}

    async def get_handles(self, student_id: str) -> dict[Platform, str]:
        return dict(self.handles.get(student_id, {}))

    async def set_handles(self, student_id: str, handles: dict[Platform, str]) -> None:
        self.handles[student_id] = dict(handles)

    async def list_students_with_handles(self) -> list[str]:
        return sorted(sid for sid, handles in self.handles.items() if handles)

    async def get_record(self, student_id: str, platform: Platform) -> CanonicalRecord | None:
        record = self.records.get(student_id, {}).get(platform)
        return record.model_copy(deep=True) if record else None

    async def list_records(self, student_id: str) -> list[CanonicalRecord]:
        return [r.model_copy(deep=True) for r in self.records.get(student_id, {}).values()]

    async def set_record(self, student_id: str, record: CanonicalRecord) -> None:
        self.records.setdefault(student_id, {})[record.platform] = record.model_copy(deep=True)

    async def delete_record(self, student_id: str, platform: Platform) -> None:
        self.records.get(student_id, {}).pop(platform, None)

    async def get_score(self, student_id: str) -> StudentScore | None:
        score = self.scores.get(student_id)
        return score.model_copy(deep=True) if score else None

    async def save_score(self, student_id: str, score: StudentScore, snapshot: ScoreSnapshot) -> None:
        self.scores[student_id] = score.model_copy(deep=True)
        self.snapshots.setdefault(student_id, []).append(snapshot.model_copy(deep=True))

    async def list_snapshots(self, student_id: str, limit: int | None = None) -> list[ScoreSnapshot]:
        newest_first = [s.model_copy(deep=True) for s in reversed(self.snapshots.get(student_id, []))]
        return newest_first if limit is None else newest_first[:limit]
