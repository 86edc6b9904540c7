"""Leaderboard Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    rank: int
    student_id: str
    display_score: int


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
    total: int


class StudentRankResponse(BaseModel):
    student_id: str
    rank: int
    display_score: int
    total: int
    percentile: float
