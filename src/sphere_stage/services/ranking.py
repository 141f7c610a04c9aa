"""Ranking primitives: vote values, click transitions, deltas and decay.

Everything in this module is pure. The vote ledger, the score aggregator and
the ranking sweep all build on these functions so that a vote and a sweep
always agree on how a post's derived scores are computed.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Final

from sphere_stage.db.time import as_utc

SECONDS_PER_DAY: Final[float] = 3600.0 * 24

# Decay factor is 2 ** (rate * (pivot - age_days)); age is measured in days.
HOT_DECAY_RATE: Final[float] = 3.0
HOT_PIVOT_DAYS: Final[float] = 2.0
TRENDING_DECAY_RATE: Final[float] = 8.0
TRENDING_PIVOT_DAYS: Final[float] = 1.0

# Keeps 2 ** exponent finite for very old or clock-skewed content.
MAX_DECAY_EXPONENT: Final[float] = 512.0


class VoteValue(IntEnum):
    """Tri-state vote; the integer value is the contribution to ``score``."""

    UP = 1
    NONE = 0
    DOWN = -1

    @classmethod
    def from_int(cls, value: int) -> VoteValue:
        """Map any stored integer onto a vote value by its sign."""
        if value > 0:
            return cls.UP
        if value < 0:
            return cls.DOWN
        return cls.NONE


class VoteClick(str, Enum):
    """Button the user pressed in the UI."""

    UP = "up"
    DOWN = "down"


# Resulting vote for every (current vote, click) pair. Clicking the active
# direction again withdraws the vote.
VOTE_CLICK_TRANSITIONS: Final[dict[tuple[VoteValue, VoteClick], VoteValue]] = {
    (VoteValue.UP, VoteClick.UP): VoteValue.NONE,
    (VoteValue.UP, VoteClick.DOWN): VoteValue.DOWN,
    (VoteValue.NONE, VoteClick.UP): VoteValue.UP,
    (VoteValue.NONE, VoteClick.DOWN): VoteValue.DOWN,
    (VoteValue.DOWN, VoteClick.UP): VoteValue.UP,
    (VoteValue.DOWN, VoteClick.DOWN): VoteValue.NONE,
}


def resolve_click(current: VoteValue, click: VoteClick) -> VoteValue:
    """Return the vote value that results from ``click`` on ``current``."""
    return VOTE_CLICK_TRANSITIONS[(VoteValue(current), VoteClick(click))]


def vote_deltas(previous: VoteValue, new: VoteValue) -> tuple[int, int]:
    """Return ``(score_delta, minus_delta)`` for a vote moving from previous to new.

    ``minus_delta`` tracks whether this voter's downvote is active: +1 when the
    vote enters ``DOWN``, -1 when it leaves ``DOWN``, 0 otherwise.
    """
    score_delta = int(new) - int(previous)
    if new == VoteValue.DOWN and previous != VoteValue.DOWN:
        minus_delta = 1
    elif new != VoteValue.DOWN and previous == VoteValue.DOWN:
        minus_delta = -1
    else:
        minus_delta = 0
    return score_delta, minus_delta


class PostSortType(str, Enum):
    """Orderings offered for post listings."""

    HOT = "hot"
    TRENDING = "trending"
    BEST = "best"
    RECENT = "recent"

    def order_by_column(self) -> str:
        """Return the post column backing this ordering."""
        return _POST_SORT_COLUMNS[self]


class CommentSortType(str, Enum):
    """Orderings offered for comment trees."""

    BEST = "best"
    RECENT = "recent"

    def order_by_column(self) -> str:
        """Return the comment column backing this ordering."""
        return _COMMENT_SORT_COLUMNS[self]


_POST_SORT_COLUMNS: Final[dict[PostSortType, str]] = {
    PostSortType.HOT: "recommended_score",
    PostSortType.TRENDING: "trending_score",
    PostSortType.BEST: "score",
    PostSortType.RECENT: "create_timestamp",
}

_COMMENT_SORT_COLUMNS: Final[dict[CommentSortType, str]] = {
    CommentSortType.BEST: "score",
    CommentSortType.RECENT: "create_timestamp",
}


def ranking_age_days(since: datetime, now: datetime) -> float:
    """Return the days elapsed from ``since`` to ``now`` (never negative)."""
    elapsed = as_utc(now) - as_utc(since)
    return max(0.0, elapsed.total_seconds() / SECONDS_PER_DAY)


def decayed_score(score: int, age_days: float, rate: float, pivot_days: float) -> float:
    """Scale ``score`` by ``2 ** (rate * (pivot_days - age_days))``.

    Negative scores are divided by the factor instead of multiplied so that,
    for any sign, the result never increases with age and never decreases
    with score.
    """
    exponent = rate * (pivot_days - age_days)
    exponent = max(-MAX_DECAY_EXPONENT, min(MAX_DECAY_EXPONENT, exponent))
    factor = 2.0 ** exponent
    if score >= 0:
        return score * factor
    return score / factor


def hot_score(score: int, create_timestamp: datetime, now: datetime) -> float:
    """Return the "hot" (recommended) score of a post, decayed by its age at ``now``."""
    age_days = ranking_age_days(create_timestamp, now)
    return decayed_score(score, age_days, HOT_DECAY_RATE, HOT_PIVOT_DAYS)


def trending_score(score: int, scoring_timestamp: datetime, now: datetime) -> float:
    """Return the trending score of a post.

    Decays steeply with the time since the post last received a vote
    (``scoring_timestamp``), so content voted on right now outranks older
    high-score content that has gone quiet.
    """
    age_days = ranking_age_days(scoring_timestamp, now)
    return decayed_score(score, age_days, TRENDING_DECAY_RATE, TRENDING_PIVOT_DAYS)
