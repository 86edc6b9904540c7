"""Per-platform signals, each a pure function of one canonical record.

Five signals in [0, 1]:
  P  problem solving (volume, weighted by difficulty where available)
  R  rating / score
  C  contest participation
  A  achievements (badges, certificates, CodeChef stars)
  D  developer contribution (GitHub only)

Platform differences live in the lookup tables below, not in branches.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from codesync.scoring.models import Badge, BadgeLevel, CanonicalRecord, Platform

# --- Problem signal ---
DIFFICULTY_WEIGHTS = (1, 2, 3)  # easy, medium, hard
DIFFICULTY_LOG_BASE = 200
TOTAL_SOLVED_LOG_BASE = 300
UNTRUSTED_PROBLEM_FACTOR = 0.7
TRUSTED_DIFFICULTY_PLATFORMS = frozenset({Platform.LEETCODE})

# --- Contest signal ---
CONTESTS_GOOD = 15
CONTESTS_EXCELLENT = 50

# --- Achievement signal ---
BADGE_POINTS: dict[BadgeLevel, int] = {
    BadgeLevel.BRONZE: 1,
    BadgeLevel.SILVER: 2,
    BadgeLevel.GOLD: 3,
    BadgeLevel.LEGENDARY: 4,
    BadgeLevel.UNKNOWN: 1,
}
CERTIFICATE_POINTS = 3
STAR_POINTS = 2
STAR_PLATFORMS = frozenset({Platform.CODECHEF})
ACHIEVEMENTS_GOOD = 10
ACHIEVEMENTS_EXCELLENT = 30

# --- Developer signal ---
DEVELOPER_PLATFORMS = frozenset({Platform.GITHUB})
CONTRIBUTIONS_LOG_BASE = 400
REPOS_GOOD, REPOS_EXCELLENT = 10, 40
STARS_GOOD, STARS_EXCELLENT = 20, 100
CONTRIBUTION_WEIGHT, REPO_WEIGHT, STAR_WEIGHT = 0.5, 0.3, 0.2

# Share of the 0..1 range reached at the "good" tier.
GOOD_TIER_VALUE = 0.7


@dataclass(frozen=True)
class Signals:
    problem: float = 0.0  # P
    rating: float = 0.0  # R
    contest: float = 0.0  # C
    achievement: float = 0.0  # A
    developer: float = 0.0  # D


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def as_float(x: float) -> float:
    """float(x), saturating ints beyond the float range to +/-inf."""
    try:
        return float(x)
    except OverflowError:
        return math.inf if x > 0 else -math.inf


def clamp01(x: float) -> float:
    """Clamp into [0, 1]. NaN counts as 0."""
    x = as_float(x)
    if math.isnan(x):
        return 0.0
    return max(0.0, min(1.0, x))


def log_scale(x: float | None, base: float) -> float:
    """ln(x + 1) / ln(base + 1); 0 for missing or non-positive input.

    Not clamped: values above ``base`` exceed 1.
    """
    if x is None:
        return 0.0
    x = as_float(x)
    if math.isnan(x) or x <= 0:
        return 0.0
    if math.isinf(x):
        return math.inf
    return math.log(x + 1) / math.log(base + 1)


def normalize_rating(value: float | None, lo: float, hi: float) -> float:
    """Linear clamp of ``value`` from [lo, hi] onto [0, 1]."""
    if value is None:
        return 0.0
    return clamp01((as_float(value) - lo) / (hi - lo))


def tiered_normalize(count: float | None, good: float, excellent: float) -> float:
    """Map a count so that 0 -> 0, ``good`` -> 0.7 and ``excellent`` -> 1.

    Linear below ``good`` and between the two tiers, saturating above.
    """
    if count is None:
        return 0.0
    count = as_float(count)
    if math.isnan(count) or count <= 0:
        return 0.0
    if count >= excellent:
        return 1.0
    if count >= good:
        return GOOD_TIER_VALUE + (1 - GOOD_TIER_VALUE) * ((count - good) / (excellent - good))
    return GOOD_TIER_VALUE * (count / good)


def badge_points(badge: Badge) -> int:
    return BADGE_POINTS.get(badge.level, BADGE_POINTS[BadgeLevel.UNKNOWN])


# ---------------------------------------------------------------------------
# P: problem solving
# ---------------------------------------------------------------------------


def problem_signal(record: CanonicalRecord) -> float:
    breakdown = record.problems_solved_by_difficulty
    if breakdown is not None and breakdown.is_known():
        easy_w, medium_w, hard_w = DIFFICULTY_WEIGHTS
        weighted = (
            easy_w * (breakdown.easy or 0)
            + medium_w * (breakdown.medium or 0)
            + hard_w * (breakdown.hard or 0)
        )
        scaled = clamp01(log_scale(weighted, DIFFICULTY_LOG_BASE))
        if record.platform in TRUSTED_DIFFICULTY_PLATFORMS:
            return scaled
        return clamp01(UNTRUSTED_PROBLEM_FACTOR * scaled)

    solved = record.problems_solved_total or 0
    return clamp01(UNTRUSTED_PROBLEM_FACTOR * clamp01(log_scale(solved, TOTAL_SOLVED_LOG_BASE)))


# ---------------------------------------------------------------------------
# R: rating
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RatingScale:
    """Where a platform's rating comes from and the range mapped onto [0, 1]."""

    source: Callable[[CanonicalRecord], float | None]
    lo: float
    hi: float


def _contest_rating(record: CanonicalRecord) -> float | None:
    return record.rating


def _domain_score_total(record: CanonicalRecord) -> float | None:
    if not record.domain_scores:
        return None
    return sum(record.domain_scores.values())


def _raw_score(record: CanonicalRecord) -> float | None:
    return record.score


# None means the platform has no rating signal at all.
RATING_SCALES: dict[Platform, RatingScale | None] = {
    Platform.LEETCODE: RatingScale(_contest_rating, 800, 2600),
    Platform.CODEFORCES: RatingScale(_contest_rating, 800, 2600),
    Platform.CODECHEF: RatingScale(_contest_rating, 800, 2600),
    Platform.ATCODER: RatingScale(_contest_rating, 800, 2600),
    Platform.HACKERRANK: RatingScale(_domain_score_total, 0, 3000),
    Platform.GITHUB: None,
}
FALLBACK_RATING_SCALE = RatingScale(_raw_score, 0, 1000)


def rating_signal(record: CanonicalRecord) -> float:
    scale = RATING_SCALES.get(record.platform, FALLBACK_RATING_SCALE)
    if scale is None:
        return 0.0
    return normalize_rating(scale.source(record), scale.lo, scale.hi)


# ---------------------------------------------------------------------------
# C, A, D
# ---------------------------------------------------------------------------


def contest_signal(record: CanonicalRecord) -> float:
    return clamp01(tiered_normalize(record.contests_participated, CONTESTS_GOOD, CONTESTS_EXCELLENT))


def achievement_points(record: CanonicalRecord) -> float:
    points: float = sum(badge_points(b) for b in record.badges)
    points += CERTIFICATE_POINTS * len(record.certificates)
    if record.platform in STAR_PLATFORMS and record.stars and record.stars > 0:
        points += STAR_POINTS * record.stars
    return points


def achievement_signal(record: CanonicalRecord) -> float:
    return clamp01(tiered_normalize(achievement_points(record), ACHIEVEMENTS_GOOD, ACHIEVEMENTS_EXCELLENT))


def developer_signal(record: CanonicalRecord) -> float:
    if record.platform not in DEVELOPER_PLATFORMS:
        return 0.0

    contributions = log_scale(record.contributions_last_year, CONTRIBUTIONS_LOG_BASE)
    repos = tiered_normalize(record.public_repos, REPOS_GOOD, REPOS_EXCELLENT)
    stars = tiered_normalize(record.stars_received, STARS_GOOD, STARS_EXCELLENT)

    return clamp01(CONTRIBUTION_WEIGHT * contributions + REPO_WEIGHT * repos + STAR_WEIGHT * stars)


def compute_signals(record: CanonicalRecord) -> Signals:
    return Signals(
        problem=problem_signal(record),
        rating=rating_signal(record),
        contest=contest_signal(record),
        achievement=achievement_signal(record),
        developer=developer_signal(record),
    )
