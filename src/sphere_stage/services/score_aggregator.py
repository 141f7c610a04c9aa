"""Apply vote deltas to content counters and refresh derived post scores."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from sphere_stage.db.time import utcnow
from sphere_stage.models import Comment, Post
from sphere_stage.services.ranking import hot_score, trending_score

logger = logging.getLogger(__name__)


def refresh_post_ranking(post: Post, now: datetime) -> None:
    """Recompute ``recommended_score`` and ``trending_score`` as of ``now``."""
    post.recommended_score = hot_score(post.score, post.create_timestamp, now)
    post.trending_score = trending_score(post.score, post.scoring_timestamp, now)


class ScoreAggregator:
    """Applies score deltas inside the caller's transaction.

    The aggregator only flushes; committing or rolling back is the vote
    ledger's job so a vote change and its score update land together.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    def apply_delta(
        self,
        db: Session,
        content: Post | Comment,
        score_delta: int,
        minus_delta: int,
    ) -> None:
        """Add the deltas to ``content`` and flush.

        Args:
            db: Session of the ongoing vote transaction.
            content: Post or comment row the vote targets (already locked).
            score_delta: Change in net score.
            minus_delta: Change in active downvote count.
        """
        if score_delta == 0 and minus_delta == 0:
            return

        content.score += score_delta
        content.score_minus += minus_delta

        if isinstance(content, Post):
            # A vote marks the post as freshly active for trending.
            now = self._clock()
            content.scoring_timestamp = now
            refresh_post_ranking(content, now)

        logger.debug(
            "Applied score delta %+d (minus %+d) to %s %s",
            score_delta,
            minus_delta,
            type(content).__name__.lower(),
            content.id,
        )
        db.flush()
