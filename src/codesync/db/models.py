"""ORM models backing the SQL document store.

Documents are stored whole as JSON in ``data``; the typed columns next to
them exist only for lookups and ordering.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Float, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from codesync.db.base import Base

JSONDocument = JSON().with_variant(JSONB(), "postgresql")
# SQLite only autoincrements INTEGER PRIMARY KEY.
SnapshotId = BigInteger().with_variant(Integer(), "sqlite")


# ---------------------------------------------------------------------------
# Handles & platform profiles
# ---------------------------------------------------------------------------


class StudentHandles(Base):
    """Linked platform handles for one student, ``{platform: handle}``."""

    __tablename__ = "student_handles"

    student_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    handles: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class PlatformProfile(Base):
    """Canonical record for one (student, platform)."""

    __tablename__ = "platform_profiles"

    student_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    platform: Mapped[str] = mapped_column(String(16), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    fetched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


class StudentScoreRow(Base):
    """Cached aggregate score, one row per student, overwritten on recompute."""

    __tablename__ = "student_scores"
    __table_args__ = (Index("ix_student_scores_display_score", "display_score"),)

    student_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    code_sync_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    display_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    computed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)


class ScoreSnapshotRow(Base):
    """Append-only score history. Rows are never updated."""

    __tablename__ = "score_snapshots"

    id: Mapped[int] = mapped_column(SnapshotId, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    taken_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
