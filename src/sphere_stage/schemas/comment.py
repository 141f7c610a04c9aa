# src/sphere_stage/schemas/comment.py
"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from sphere_stage.schemas.vote import VoteOut
from sphere_stage.services.comment_tree import CommentNode


class CommentCreate(BaseModel):
    """Schema for replying to a post or a comment."""

    body: str = Field(..., min_length=1, max_length=20000)
    parent_id: int | None = Field(None, description="Comment replied to; omit for a root comment")
    is_pinned: bool = Field(False, description="Pinning requires moderator rights")


class CommentUpdate(BaseModel):
    """Schema for editing a comment."""

    body: str = Field(..., min_length=1, max_length=20000)
    is_pinned: bool | None = Field(None, description="Pinning requires moderator rights")


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API."""

    id: int
    post_id: int
    parent_id: int | None
    creator_id: int
    body: str
    is_pinned: bool
    score: int
    score_minus: int
    create_timestamp: datetime
    edit_timestamp: datetime | None

    model_config = ConfigDict(from_attributes=True)


class CommentNodeOut(BaseModel):
    """A comment, the caller's vote on it and its sorted replies."""

    comment: CommentResponse
    vote: VoteOut | None = None
    children: list[CommentNodeOut] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CommentNode) -> CommentNodeOut:
        return cls(
            comment=CommentResponse.model_validate(node.comment),
            vote=VoteOut.model_validate(node.vote) if node.vote is not None else None,
            children=[cls.from_node(child) for child in node.children],
        )
