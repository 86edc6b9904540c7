"""Raw adapter payload -> CanonicalRecord.

Adapters return loosely-typed dicts whose key names differ per platform
(``totalSolved`` vs ``problemsSolved``, ``contestRating`` vs ``rating``,
``ratedMatches`` vs ``contestsAttended`` ...). Each canonical field has an
alias list; the first alias holding a usable value wins. Fields are coerced
independently so one malformed field never costs the others.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from codesync.scoring.models import (
    Badge,
    BadgeLevel,
    CanonicalRecord,
    Certificate,
    DifficultyBreakdown,
    Platform,
)

# A count-typed "badges" / "certificatesCount" field expands into this many
# placeholder entries at most.
MAX_EXPANDED_ITEMS = 100

# Counts beyond this are clamped; no platform reports anything close.
MAX_COUNT = 10**12


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _count(value: Any) -> int | None:
    # CodeChef reports solved counts as {"total": n, ...}
    if isinstance(value, Mapping):
        return _count(value.get("total"))
    number = _number(value)
    if number is None:
        return None
    return max(-MAX_COUNT, min(int(number), MAX_COUNT))


def _text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


Coercer = Callable[[Any], Any]

_FIELD_COERCERS: dict[str, Coercer] = {
    "handle": _text,
    "display_name": _text,
    "profile_url": _text,
    "problems_solved_total": _count,
    "rating": _number,
    "max_rating": _number,
    "score": _number,
    "contests_participated": _count,
    "stars": _count,
    "fully_solved": _count,
    "partially_solved": _count,
    "contributions_last_year": _count,
    "public_repos": _count,
    "stars_received": _count,
    "followers": _count,
}


# ---------------------------------------------------------------------------
# Alias tables
# ---------------------------------------------------------------------------

_COMMON_ALIASES: dict[str, tuple[str, ...]] = {
    "handle": ("handle", "username"),
    "display_name": ("display_name", "displayName"),
    "profile_url": ("profile_url", "profileUrl"),
    "problems_solved_total": ("problems_solved_total", "problemsSolvedTotal", "totalSolved", "problemsSolved"),
    "rating": ("rating",),
    "max_rating": ("max_rating", "maxRating"),
    "score": ("score",),
    "contests_participated": ("contests_participated", "contestsParticipated"),
    "stars": ("stars",),
    "fully_solved": ("fully_solved", "fullySolved"),
    "partially_solved": ("partially_solved", "partiallySolved"),
    "contributions_last_year": ("contributions_last_year", "contributionsLastYear"),
    "public_repos": ("public_repos", "publicRepos"),
    "stars_received": ("stars_received", "starsReceived"),
    "followers": ("followers",),
}

# Searched after the common aliases.
PLATFORM_ALIASES: dict[Platform, dict[str, tuple[str, ...]]] = {
    Platform.LEETCODE: {
        "rating": ("contestRating",),
        "contests_participated": ("attendedContests", "attendedContestsCount"),
    },
    Platform.CODEFORCES: {
        "contests_participated": ("contestsAttended",),
    },
    Platform.CODECHEF: {
        "rating": ("currentRating",),
        "max_rating": ("highestRating",),
    },
    Platform.ATCODER: {
        "max_rating": ("highestRating",),
        "contests_participated": ("ratedMatches", "totalContests"),
    },
    Platform.HACKERRANK: {
        "display_name": ("fullName",),
    },
    Platform.GITHUB: {
        "display_name": ("name",),
        "stars_received": ("totalStars",),
    },
}

_DIFFICULTY_KEYS = ("problems_solved_by_difficulty", "problemsSolvedByDifficulty")
_FLAT_DIFFICULTY_KEYS = {"easy": "solvedEasy", "medium": "solvedMedium", "hard": "solvedHard"}
_DOMAIN_KEYS = ("domain_scores", "domainScores", "domains")
_CERTIFICATE_COUNT_KEYS = ("certificates_count", "certificatesCount")
_BADGE_COUNT_KEYS = ("badges_count", "badgesCount")


def _aliases_for(platform: Platform, field: str) -> tuple[str, ...]:
    return _COMMON_ALIASES[field] + PLATFORM_ALIASES.get(platform, {}).get(field, ())


def _first(raw: Mapping[str, Any], keys: tuple[str, ...], coerce: Coercer) -> Any:
    for key in keys:
        if key in raw:
            value = coerce(raw[key])
            if value is not None:
                return value
    return None


# ---------------------------------------------------------------------------
# Structured fields
# ---------------------------------------------------------------------------


def parse_badge_level(value: Any) -> BadgeLevel:
    """Badge level from text ("Gold", "5 star silver") or a 1-3 star count."""
    if isinstance(value, BadgeLevel):
        return value
    if isinstance(value, str):
        lower = value.strip().lower()
        for level in (BadgeLevel.GOLD, BadgeLevel.SILVER, BadgeLevel.BRONZE):
            if level.value in lower:
                return level
        if "legend" in lower:
            return BadgeLevel.LEGENDARY
        return BadgeLevel.UNKNOWN
    if isinstance(value, int) and not isinstance(value, bool):
        if value >= 3:
            return BadgeLevel.GOLD
        if value == 2:
            return BadgeLevel.SILVER
        if value == 1:
            return BadgeLevel.BRONZE
    return BadgeLevel.UNKNOWN


def _badge(item: Any) -> Badge | None:
    if isinstance(item, str):
        return Badge(name=item.strip())
    if isinstance(item, Mapping):
        name = _text(item.get("name")) or _text(item.get("badge_name")) or ""
        level = item.get("level", item.get("star_level"))
        return Badge(name=name, level=parse_badge_level(level))
    return None


def _placeholder_count(value: Any) -> int:
    count = _count(value)
    if count is None or count <= 0:
        return 0
    return min(count, MAX_EXPANDED_ITEMS)


def _badges(raw: Mapping[str, Any]) -> list[Badge]:
    value = raw.get("badges")
    if isinstance(value, list):
        return [b for b in (_badge(item) for item in value) if b is not None]
    if value is None:
        value = _first(raw, _BADGE_COUNT_KEYS, _count)
    # LeetCode reports only a badge count; levels are unknown.
    return [Badge(name=f"badge #{i + 1}") for i in range(_placeholder_count(value))]


def _certificates(raw: Mapping[str, Any]) -> list[Certificate]:
    value = raw.get("certificates")
    if isinstance(value, list):
        certificates = []
        for item in value:
            if isinstance(item, str):
                certificates.append(Certificate(name=item.strip()))
            elif isinstance(item, Mapping):
                certificates.append(Certificate(name=_text(item.get("name")) or _text(item.get("title")) or ""))
        return certificates
    count = _first(raw, _CERTIFICATE_COUNT_KEYS, _count)
    return [Certificate() for _ in range(_placeholder_count(count))]


def _difficulty(raw: Mapping[str, Any]) -> DifficultyBreakdown | None:
    nested = next((raw[k] for k in _DIFFICULTY_KEYS if isinstance(raw.get(k), Mapping)), None)
    if nested is not None:
        breakdown = DifficultyBreakdown(
            easy=_count(nested.get("easy")),
            medium=_count(nested.get("medium")),
            hard=_count(nested.get("hard")),
        )
    else:
        breakdown = DifficultyBreakdown(**{label: _count(raw.get(key)) for label, key in _FLAT_DIFFICULTY_KEYS.items()})
    return breakdown if breakdown.is_known() else None


def _domain_scores(raw: Mapping[str, Any]) -> dict[str, float]:
    value = next((raw[k] for k in _DOMAIN_KEYS if isinstance(raw.get(k), Mapping)), None)
    if value is None:
        return {}
    scores = {}
    for domain, score in value.items():
        number = _number(score)
        if number is not None:
            scores[str(domain)] = number
    return scores


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_record(
    platform: Platform,
    raw: Any,
    *,
    handle: str | None = None,
    now: datetime | None = None,
) -> CanonicalRecord | None:
    """Map one adapter payload onto the canonical schema.

    Returns None only when ``raw`` is not a mapping at all. Any individual
    field that is missing or has the wrong shape is left unknown.
    """
    if not isinstance(raw, Mapping):
        return None

    fields = {name: _first(raw, _aliases_for(platform, name), coerce) for name, coerce in _FIELD_COERCERS.items()}
    if handle:
        fields["handle"] = handle

    return CanonicalRecord(
        platform=platform,
        problems_solved_by_difficulty=_difficulty(raw),
        badges=_badges(raw),
        certificates=_certificates(raw),
        domain_scores=_domain_scores(raw),
        fetched_at=now or datetime.now(timezone.utc),
        **fields,
    )


def parse_handles(raw: Any) -> dict[Platform, str]:
    """Linked handles keyed by platform. Blank values and unknown platforms are dropped."""
    if not isinstance(raw, Mapping):
        return {}
    handles: dict[Platform, str] = {}
    for key, value in raw.items():
        try:
            platform = Platform(str(key).strip().lower())
        except ValueError:
            continue
        handle = _text(value)
        if handle:
            handles[platform] = handle
    return handles


def estimate_problems_solved(record: CanonicalRecord) -> int:
    """Best available solved-problem count for one record."""
    if record.problems_solved_total is not None:
        return max(record.problems_solved_total, 0)
    breakdown = record.problems_solved_by_difficulty
    if breakdown is not None and breakdown.is_known():
        return max(breakdown.total(), 0)
    if record.platform is Platform.CODECHEF:
        return max((record.fully_solved or 0) + (record.partially_solved or 0), 0)
    return 0
