# src/sphere_stage/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Sphere API."""

from fastapi import APIRouter, Query

from sphere_stage.api.v1.dependencies import CurrentUserDep, SessionDep, raise_http_error
from sphere_stage.models import Vote
from sphere_stage.schemas.vote import VoteOut, VoteRequest, VoteResponse
from sphere_stage.services.errors import RankingError
from sphere_stage.services.ranking import VoteValue
from sphere_stage.services.vote_ledger import PriorVote, VoteLedger

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("/", response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Apply an upvote/downvote click on a post or comment.

    The client sends the vote it currently displays as ``prior_vote``; a stale
    value is rejected with 409 so the client can refresh and retry.
    """
    prior_vote = None
    if vote_data.prior_vote is not None:
        prior_vote = PriorVote(
            vote_id=vote_data.prior_vote.vote_id,
            value=VoteValue(vote_data.prior_vote.value),
        )

    ledger = VoteLedger(db)
    try:
        outcome = ledger.toggle_vote(
            current_user.id,
            vote_data.post_id,
            vote_data.comment_id,
            vote_data.click,
            prior_vote,
        )
    except RankingError as err:
        raise_http_error(err)

    return VoteResponse(
        vote=VoteOut.model_validate(outcome.vote) if outcome.vote is not None else None,
        value=int(outcome.value),
        score=outcome.score,
        score_minus=outcome.score_minus,
    )


@router.get("/{post_id}/my-vote", response_model=VoteOut | None)
async def get_my_vote(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    comment_id: int | None = Query(None),
) -> Vote | None:
    """Get current user's vote on a post, or on one of its comments."""
    query = db.query(Vote).filter(
        Vote.post_id == post_id,
        Vote.voter_id == current_user.id,
    )
    if comment_id is None:
        query = query.filter(Vote.comment_id.is_(None))
    else:
        query = query.filter(Vote.comment_id == comment_id)
    return query.first()
