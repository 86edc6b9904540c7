"""Skill combiner tests."""

from __future__ import annotations

import itertools

import pytest

from codesync.scoring.models import ALL_PLATFORMS, CanonicalRecord, DifficultyBreakdown, Platform
from codesync.scoring.signals import Signals
from codesync.scoring.skill import SKILL_WEIGHTS, combine_signals_to_skill, compute_platform_skill


@pytest.mark.parametrize("platform", ALL_PLATFORMS)
def test_weights_sum_to_one(platform: Platform) -> None:
    """Each platform's signal weights sum to 1."""
    w = SKILL_WEIGHTS[platform]
    assert w.problem + w.rating + w.contest + w.achievement + w.developer == pytest.approx(1.0)


@pytest.mark.parametrize("platform", ALL_PLATFORMS)
def test_extremes(platform: Platform) -> None:
    """All-zero signals give 0 and all-one signals give 100."""
    assert combine_signals_to_skill(platform, Signals()) == 0.0
    assert combine_signals_to_skill(platform, Signals(1, 1, 1, 1, 1)) == pytest.approx(100.0)


@pytest.mark.parametrize("platform", ALL_PLATFORMS)
def test_skill_in_range_for_any_signal_mix(platform: Platform) -> None:
    """Skill stays in [0, 100] for any signal mix."""
    for values in itertools.product((0.0, 0.5, 1.0), repeat=5):
        skill = combine_signals_to_skill(platform, Signals(*values))
        assert 0.0 <= skill <= 100.0


def test_platform_weighting() -> None:
    """Weights differ by platform."""
    rating_only = Signals(rating=1.0)
    assert combine_signals_to_skill(Platform.LEETCODE, rating_only) == pytest.approx(35.0)
    assert combine_signals_to_skill(Platform.CODEFORCES, rating_only) == pytest.approx(50.0)
    assert combine_signals_to_skill(Platform.HACKERRANK, Signals(achievement=1.0)) == pytest.approx(50.0)
    assert combine_signals_to_skill(Platform.GITHUB, Signals(developer=1.0)) == pytest.approx(70.0)
    assert combine_signals_to_skill(Platform.HACKERRANK, Signals(contest=1.0)) == 0.0


def test_compute_platform_skill() -> None:
    """A record is turned into a skill with its signals."""
    record = CanonicalRecord(
        platform=Platform.LEETCODE,
        problems_solved_by_difficulty=DifficultyBreakdown(easy=200),
        rating=2600,
    )
    skill = compute_platform_skill(record)
    assert skill.platform is Platform.LEETCODE
    assert skill.signals.problem == pytest.approx(1.0)
    assert skill.signals.rating == 1.0
    assert skill.skill == pytest.approx(70.0)


def test_empty_record_skill_is_zero() -> None:
    """An empty record has zero skill."""
    for platform in ALL_PLATFORMS:
        assert compute_platform_skill(CanonicalRecord(platform=platform)).skill == 0.0
