"""Vote ledger: one vote per user per content item, applied transactionally.

The ledger resolves a requested vote value against the vote the caller last
observed, persists the change (insert, update or delete) and hands the
resulting deltas to the score aggregator. Both writes share one transaction:
the ledger commits once at the end and rolls back on any failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sphere_stage.db.time import utcnow
from sphere_stage.models import Comment, Post, Vote
from sphere_stage.services.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    RankingError,
)
from sphere_stage.services.moderation import ModerationGate
from sphere_stage.services.ranking import VoteClick, VoteValue, resolve_click, vote_deltas
from sphere_stage.services.score_aggregator import ScoreAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriorVote:
    """Vote the caller last observed for the content it is voting on."""

    vote_id: int
    value: VoteValue

    def __post_init__(self) -> None:
        if VoteValue(self.value) is VoteValue.NONE:
            raise ValueError("A stored vote is never NONE; pass no prior vote instead")


@dataclass(frozen=True)
class VoteOutcome:
    """Result of a vote request.

    Attributes:
        vote: Persisted vote row, or None when the user has no vote anymore.
        value: Resulting vote value.
        score_delta: Change applied to the content's score.
        minus_delta: Change applied to the content's downvote count.
        score: Content score after the vote.
        score_minus: Content downvote count after the vote.
    """

    vote: Vote | None
    value: VoteValue
    score_delta: int
    minus_delta: int
    score: int
    score_minus: int


class VoteLedger:
    """Owns the single-vote-per-user-per-content invariant."""

    def __init__(
        self,
        db: Session,
        gate: ModerationGate | None = None,
        aggregator: ScoreAggregator | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self._clock = clock
        self.gate = gate or ModerationGate(db, clock)
        self.aggregator = aggregator or ScoreAggregator(clock)

    def toggle_vote(
        self,
        voter_id: int,
        post_id: int,
        comment_id: int | None,
        click: VoteClick,
        known_prior_vote: PriorVote | None,
    ) -> VoteOutcome:
        """Apply an upvote/downvote button click on top of the caller's prior vote."""
        current = known_prior_vote.value if known_prior_vote else VoteValue.NONE
        requested = resolve_click(current, click)
        return self.apply_vote(voter_id, post_id, comment_id, requested, known_prior_vote)

    def apply_vote(
        self,
        voter_id: int,
        post_id: int,
        comment_id: int | None,
        requested_value: VoteValue,
        known_prior_vote: PriorVote | None,
    ) -> VoteOutcome:
        """Set the voter's vote on a post or comment to ``requested_value``.

        Args:
            voter_id: Identifier of the voting user.
            post_id: Post voted on, or containing the comment voted on.
            comment_id: Comment voted on, None for a vote on the post itself.
            requested_value: Vote value the user should end up with.
            known_prior_vote: Vote the caller last observed, None if it saw none.

        Returns:
            The outcome including the new score of the content.

        Raises:
            UnauthorizedError: If the voter is banned from the sphere or globally.
            NotFoundError: If the post or comment is missing or hidden.
            ConflictError: If ``known_prior_vote`` does not match the stored vote.
            InternalError: If storage fails; nothing is applied.
        """
        try:
            outcome = self._apply_vote(
                voter_id,
                post_id,
                comment_id,
                VoteValue(requested_value),
                known_prior_vote,
            )
            self.db.commit()
        except RankingError:
            self.db.rollback()
            raise
        except IntegrityError as err:
            self.db.rollback()
            raise ConflictError("Vote changed concurrently, refresh and retry") from err
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Failed to record vote on post %s: %s", post_id, err, exc_info=True)
            raise InternalError("Failed to record vote") from err

        return outcome

    def _apply_vote(
        self,
        voter_id: int,
        post_id: int,
        comment_id: int | None,
        requested: VoteValue,
        known_prior_vote: PriorVote | None,
    ) -> VoteOutcome:
        self.gate.authorize_vote(voter_id, post_id)
        content = self._load_content(post_id, comment_id)

        existing = self.db.scalars(
            select(Vote)
            .where(
                Vote.voter_id == voter_id,
                Vote.post_id == post_id,
                Vote.comment_id.is_(None) if comment_id is None else Vote.comment_id == comment_id,
            )
            .with_for_update()
        ).first()
        previous = self._check_prior_vote(existing, known_prior_vote)

        if requested == previous:
            logger.debug("Vote already has value %s, nothing to update", requested.name)
            return VoteOutcome(
                vote=existing,
                value=previous,
                score_delta=0,
                minus_delta=0,
                score=content.score,
                score_minus=content.score_minus,
            )

        vote = self._persist_vote_change(existing, requested, voter_id, post_id, comment_id)
        score_delta, minus_delta = vote_deltas(previous, requested)
        self.aggregator.apply_delta(self.db, content, score_delta, minus_delta)

        return VoteOutcome(
            vote=vote,
            value=requested,
            score_delta=score_delta,
            minus_delta=minus_delta,
            score=content.score,
            score_minus=content.score_minus,
        )

    def _load_content(self, post_id: int, comment_id: int | None) -> Post | Comment:
        post = self.db.scalars(
            select(Post).where(Post.id == post_id).with_for_update()
        ).first()
        if post is None or not post.is_visible:
            raise NotFoundError("Post not found")
        if comment_id is None:
            return post

        comment = self.db.scalars(
            select(Comment)
            .where(Comment.id == comment_id, Comment.post_id == post_id)
            .with_for_update()
        ).first()
        if comment is None or not comment.is_visible:
            raise NotFoundError("Comment not found")
        return comment

    @staticmethod
    def _check_prior_vote(existing: Vote | None, known_prior_vote: PriorVote | None) -> VoteValue:
        """Return the stored vote value after checking the caller is up to date."""
        if known_prior_vote is None:
            if existing is not None:
                raise ConflictError("A vote already exists for this content, refresh and retry")
            return VoteValue.NONE

        if (
            existing is None
            or existing.id != known_prior_vote.vote_id
            or VoteValue.from_int(existing.value) != known_prior_vote.value
        ):
            raise ConflictError("Vote reference is stale, refresh and retry")
        return VoteValue.from_int(existing.value)

    def _persist_vote_change(
        self,
        existing: Vote | None,
        requested: VoteValue,
        voter_id: int,
        post_id: int,
        comment_id: int | None,
    ) -> Vote | None:
        if requested is VoteValue.NONE:
            if existing is None:
                raise InternalError("No stored vote to remove")
            logger.debug("Delete vote %s", existing.id)
            self.db.delete(existing)
            self.db.flush()
            return None

        if existing is not None:
            logger.debug("Update vote %s with value %s", existing.id, requested.name)
            existing.value = int(requested)
            existing.timestamp = self._clock()
            self.db.flush()
            return existing

        logger.debug(
            "Create vote for post %s, comment %s, user %s with value %s",
            post_id,
            comment_id,
            voter_id,
            requested.name,
        )
        vote = Vote(
            voter_id=voter_id,
            post_id=post_id,
            comment_id=comment_id,
            value=int(requested),
            timestamp=self._clock(),
        )
        self.db.add(vote)
        self.db.flush()
        return vote
