"""Cross-platform aggregation: skills -> CodeSync score -> display score.

The best platform counts in full; every other platform with data adds 30%
of the others' mean. Platforms without a record are left out of the mean
rather than averaged in as zeros.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from codesync.scoring.models import ALL_PLATFORMS, CanonicalRecord, Platform, PlatformBreakdown
from codesync.scoring.normalize import estimate_problems_solved
from codesync.scoring.skill import PlatformSkill, compute_platform_skill

# Bump whenever a formula or constant in the scoring package changes; every
# cached StudentScore with another version is then treated as stale.
SCORING_VERSION = 1

MULTI_PLATFORM_BONUS = 0.3
MAX_SCORE = 100.0


def compute_code_sync_score(skills: Iterable[float]) -> float:
    values = sorted(skills, reverse=True)
    if not values:
        return 0.0
    best, others = values[0], values[1:]
    if not others:
        return best
    score = best + MULTI_PLATFORM_BONUS * (sum(others) / len(others))
    return max(0.0, min(MAX_SCORE, score))


def compute_display_score(score: float) -> int:
    """round(score x 10), halves rounded up."""
    return int(math.floor(score * 10 + 0.5))


def skill_map(skills: Iterable[PlatformSkill]) -> dict[Platform, float]:
    """Skill per platform for all six platforms; missing platforms are 0."""
    by_platform = {s.platform: s.skill for s in skills}
    return {platform: by_platform.get(platform, 0.0) for platform in ALL_PLATFORMS}


@dataclass(frozen=True)
class SkillDelta:
    per_platform: dict[Platform, float]
    total: float


def compute_skill_delta(prev: Mapping[Platform, float], current: Mapping[Platform, float]) -> SkillDelta:
    """Positive per-platform skill gains between two skill maps."""
    per_platform: dict[Platform, float] = {}
    for platform in ALL_PLATFORMS:
        gain = current.get(platform, 0.0) - prev.get(platform, 0.0)
        if gain > 0:
            per_platform[platform] = gain
    return SkillDelta(per_platform=per_platform, total=sum(per_platform.values()))


@dataclass(frozen=True)
class ScoreComputation:
    skills: list[PlatformSkill]
    code_sync_score: float
    display_score: int
    total_problems_solved: int
    breakdown: dict[Platform, PlatformBreakdown] = field(default_factory=dict)

    @property
    def platform_skills(self) -> dict[Platform, float]:
        return skill_map(self.skills)


def score_records(records: Iterable[CanonicalRecord]) -> ScoreComputation:
    """Run signals -> skills -> aggregate over one student's records."""
    by_platform: dict[Platform, CanonicalRecord] = {}
    for record in records:
        by_platform[record.platform] = record

    ordered = [by_platform[p] for p in ALL_PLATFORMS if p in by_platform]
    skills = [compute_platform_skill(record) for record in ordered]
    score = compute_code_sync_score(s.skill for s in skills)

    breakdown: dict[Platform, PlatformBreakdown] = {}
    total_solved = 0
    for record in ordered:
        solved = estimate_problems_solved(record)
        total_solved += solved
        breakdown[record.platform] = PlatformBreakdown(
            problems_solved=solved,
            rating=record.rating,
            contests=record.contests_participated,
        )

    return ScoreComputation(
        skills=skills,
        code_sync_score=score,
        display_score=compute_display_score(score),
        total_problems_solved=total_solved,
        breakdown=breakdown,
    )
