"""DocumentStore on async SQLAlchemy (asyncpg in production, aiosqlite in tests)."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from codesync.db.models import PlatformProfile, ScoreSnapshotRow, StudentHandles, StudentScoreRow
from codesync.errors import PersistenceError
from codesync.scoring.models import CanonicalRecord, Platform, ScoreSnapshot, StudentScore
from codesync.scoring.normalize import parse_handles


class SqlDocumentStore:
    """Each call runs in its own session; writes commit or roll back as a unit."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    @asynccontextmanager
    async def _write(self, action: str) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                msg = f"Failed to {action}: {exc}"
                raise PersistenceError(msg) from exc

    # --- Linked handles ---

    async def get_handles(self, student_id: str) -> dict[Platform, str]:
        async with self.session_factory() as session:
            row = await session.get(StudentHandles, student_id)
            return parse_handles(row.handles) if row else {}

    async def set_handles(self, student_id: str, handles: dict[Platform, str]) -> None:
        async with self._write("save handles") as session:
            await session.merge(
                StudentHandles(
                    student_id=student_id,
                    handles={platform.value: handle for platform, handle in handles.items()},
                )
            )

    async def list_students_with_handles(self) -> list[str]:
        async with self.session_factory() as session:
            result = await session.execute(select(StudentHandles).order_by(StudentHandles.student_id))
            return [row.student_id for row in result.scalars() if parse_handles(row.handles)]

    # --- Canonical records ---

    async def get_record(self, student_id: str, platform: Platform) -> CanonicalRecord | None:
        async with self.session_factory() as session:
            row = await session.get(PlatformProfile, (student_id, platform.value))
            return CanonicalRecord.model_validate(row.data) if row else None

    async def list_records(self, student_id: str) -> list[CanonicalRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PlatformProfile).where(PlatformProfile.student_id == student_id)
            )
            return [CanonicalRecord.model_validate(row.data) for row in result.scalars()]

    async def set_record(self, student_id: str, record: CanonicalRecord) -> None:
        async with self._write(f"save {record.platform.value} profile") as session:
            await session.merge(
                PlatformProfile(
                    student_id=student_id,
                    platform=record.platform.value,
                    data=record.model_dump(mode="json"),
                    fetched_at=record.fetched_at,
                )
            )

    async def delete_record(self, student_id: str, platform: Platform) -> None:
        async with self._write(f"delete {platform.value} profile") as session:
            await session.execute(
                delete(PlatformProfile).where(
                    PlatformProfile.student_id == student_id,
                    PlatformProfile.platform == platform.value,
                )
            )

    # --- Score + snapshots ---

    async def get_score(self, student_id: str) -> StudentScore | None:
        async with self.session_factory() as session:
            row = await session.get(StudentScoreRow, student_id)
            return StudentScore.model_validate(row.data) if row else None

    async def save_score(self, student_id: str, score: StudentScore, snapshot: ScoreSnapshot) -> None:
        async with self._write("save score") as session:
            await session.merge(
                StudentScoreRow(
                    student_id=student_id,
                    code_sync_score=score.code_sync_score,
                    display_score=score.display_score,
                    version=score.version,
                    computed_at=score.computed_at,
                    expires_at=score.expires_at,
                    data=score.model_dump(mode="json"),
                )
            )
            session.add(
                ScoreSnapshotRow(
                    student_id=student_id,
                    taken_at=snapshot.taken_at,
                    data=snapshot.model_dump(mode="json"),
                )
            )

    async def list_snapshots(self, student_id: str, limit: int | None = None) -> list[ScoreSnapshot]:
        async with self.session_factory() as session:
            stmt = (
                select(ScoreSnapshotRow)
                .where(ScoreSnapshotRow.student_id == student_id)
                .order_by(ScoreSnapshotRow.id.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            result = await session.execute(stmt)
            return [ScoreSnapshot.model_validate(row.data) for row in result.scalars()]
