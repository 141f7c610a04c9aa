"""Tests for vote values, click transitions, deltas and decay curves."""

from datetime import timedelta

import pytest

from sphere_stage.services.ranking import (
    CommentSortType,
    PostSortType,
    VoteClick,
    VoteValue,
    decayed_score,
    hot_score,
    ranking_age_days,
    resolve_click,
    trending_score,
    vote_deltas,
)
from tests.conftest import FIXED_NOW

UP, NONE, DOWN = VoteValue.UP, VoteValue.NONE, VoteValue.DOWN


@pytest.mark.parametrize(
    ("current", "click", "expected"),
    [
        (UP, VoteClick.UP, NONE),
        (UP, VoteClick.DOWN, DOWN),
        (NONE, VoteClick.UP, UP),
        (NONE, VoteClick.DOWN, DOWN),
        (DOWN, VoteClick.UP, UP),
        (DOWN, VoteClick.DOWN, NONE),
    ],
)
def test_resolve_click(current, click, expected) -> None:
    assert resolve_click(current, click) is expected


@pytest.mark.parametrize(
    ("previous", "new", "expected"),
    [
        (NONE, NONE, (0, 0)),
        (NONE, UP, (1, 0)),
        (NONE, DOWN, (-1, 1)),
        (UP, NONE, (-1, 0)),
        (UP, UP, (0, 0)),
        (UP, DOWN, (-2, 1)),
        (DOWN, NONE, (1, -1)),
        (DOWN, UP, (2, -1)),
        (DOWN, DOWN, (0, 0)),
    ],
)
def test_vote_deltas(previous, new, expected) -> None:
    assert vote_deltas(previous, new) == expected


def test_vote_value_from_int_uses_sign() -> None:
    assert VoteValue.from_int(1) is UP
    assert VoteValue.from_int(7) is UP
    assert VoteValue.from_int(0) is NONE
    assert VoteValue.from_int(-3) is DOWN


def test_sort_columns() -> None:
    assert PostSortType.HOT.order_by_column() == "recommended_score"
    assert PostSortType.TRENDING.order_by_column() == "trending_score"
    assert PostSortType.BEST.order_by_column() == "score"
    assert PostSortType.RECENT.order_by_column() == "create_timestamp"
    assert CommentSortType.BEST.order_by_column() == "score"
    assert CommentSortType.RECENT.order_by_column() == "create_timestamp"


def test_ranking_age_days_never_negative() -> None:
    assert ranking_age_days(FIXED_NOW, FIXED_NOW + timedelta(days=1, hours=12)) == 1.5
    assert ranking_age_days(FIXED_NOW, FIXED_NOW - timedelta(hours=1)) == 0.0


def test_hot_score_reference_values() -> None:
    # Fresh post: 2 ** (3 * 2) = 64.
    assert hot_score(10, FIXED_NOW, FIXED_NOW) == pytest.approx(640.0)
    # At the two-day pivot the score is unchanged.
    assert hot_score(10, FIXED_NOW, FIXED_NOW + timedelta(days=2)) == pytest.approx(10.0)
    assert hot_score(0, FIXED_NOW, FIXED_NOW) == 0.0


def test_trending_decays_faster_than_hot() -> None:
    later = FIXED_NOW + timedelta(days=3)
    assert trending_score(10, FIXED_NOW, later) < hot_score(10, FIXED_NOW, later)
    assert trending_score(10, FIXED_NOW, FIXED_NOW + timedelta(days=1)) == pytest.approx(10.0)


@pytest.mark.parametrize("score", [-50, -1, 0, 1, 50])
def test_decay_is_monotonic_in_age(score) -> None:
    ages = [0.0, 0.5, 1.0, 2.0, 5.0, 30.0]
    values = [decayed_score(score, age, 3.0, 2.0) for age in ages]
    assert values == sorted(values, reverse=True)


@pytest.mark.parametrize("age", [0.0, 1.0, 2.0, 10.0])
def test_decay_is_increasing_in_score(age) -> None:
    values = [decayed_score(score, age, 8.0, 1.0) for score in range(-5, 6)]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_decay_stays_finite_for_extreme_ages() -> None:
    assert decayed_score(5, 10_000.0, 8.0, 1.0) >= 0.0
    assert decayed_score(5, -10_000.0, 8.0, 1.0) < float("inf")
    assert decayed_score(-5, 10_000.0, 8.0, 1.0) <= 0.0


def test_trending_follows_recent_activity_not_post_age() -> None:
    quiet_favourite = trending_score(50, FIXED_NOW - timedelta(days=2), FIXED_NOW)
    voted_just_now = trending_score(5, FIXED_NOW, FIXED_NOW)

    assert voted_just_now > quiet_favourite


def test_hot_score_ages_from_creation() -> None:
    created = FIXED_NOW - timedelta(days=3)

    assert hot_score(10, created, FIXED_NOW) < hot_score(10, FIXED_NOW, FIXED_NOW)
    assert hot_score(10, created, FIXED_NOW) == pytest.approx(10 * 2.0 ** (3 * (2 - 3)))
