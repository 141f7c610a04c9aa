# src/sphere_stage/schemas/vote.py
"""Vote-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from sphere_stage.services.ranking import VoteClick


class PriorVoteIn(BaseModel):
    """Vote the client last observed for the content it is voting on."""

    vote_id: int
    value: Literal[-1, 1] = Field(..., description="1 for upvote, -1 for downvote")


class VoteRequest(BaseModel):
    """Schema for an upvote/downvote button click."""

    post_id: int
    comment_id: int | None = Field(None, description="Comment voted on; omit for the post")
    click: VoteClick
    prior_vote: PriorVoteIn | None = Field(
        None,
        description="Vote the client currently displays; omit if it displays none",
    )


class VoteOut(BaseModel):
    """Schema for a stored vote."""

    id: int
    voter_id: int
    post_id: int
    comment_id: int | None
    value: int
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class VoteResponse(BaseModel):
    """Schema returned after a vote: the resulting vote and content counters."""

    vote: VoteOut | None
    value: int
    score: int
    score_minus: int
