"""Per-platform skill: a fixed linear blend of the five signals, 0..100."""

from __future__ import annotations

from dataclasses import dataclass

from codesync.scoring.models import CanonicalRecord, Platform
from codesync.scoring.signals import Signals, clamp01, compute_signals


@dataclass(frozen=True)
class SkillWeights:
    problem: float
    rating: float
    contest: float
    achievement: float
    developer: float

    def apply(self, signals: Signals) -> float:
        return (
            self.problem * signals.problem
            + self.rating * signals.rating
            + self.contest * signals.contest
            + self.achievement * signals.achievement
            + self.developer * signals.developer
        )


_RATED_CONTEST_WEIGHTS = SkillWeights(problem=0.20, rating=0.50, contest=0.25, achievement=0.05, developer=0.0)

SKILL_WEIGHTS: dict[Platform, SkillWeights] = {
    Platform.LEETCODE: SkillWeights(problem=0.35, rating=0.35, contest=0.20, achievement=0.10, developer=0.0),
    Platform.CODEFORCES: _RATED_CONTEST_WEIGHTS,
    Platform.CODECHEF: _RATED_CONTEST_WEIGHTS,
    Platform.ATCODER: _RATED_CONTEST_WEIGHTS,
    Platform.HACKERRANK: SkillWeights(problem=0.15, rating=0.35, contest=0.0, achievement=0.50, developer=0.0),
    Platform.GITHUB: SkillWeights(problem=0.10, rating=0.10, contest=0.0, achievement=0.10, developer=0.70),
}


@dataclass(frozen=True)
class PlatformSkill:
    platform: Platform
    skill: float
    signals: Signals


def combine_signals_to_skill(platform: Platform, signals: Signals) -> float:
    """Weighted signal sum, clamped to [0, 1] and scaled to [0, 100]."""
    return clamp01(SKILL_WEIGHTS[platform].apply(signals)) * 100


def compute_platform_skill(record: CanonicalRecord) -> PlatformSkill:
    signals = compute_signals(record)
    return PlatformSkill(
        platform=record.platform,
        skill=combine_signals_to_skill(record.platform, signals),
        signals=signals,
    )
