# src/sphere_stage/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from sphere_stage.schemas.vote import VoteOut


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    sphere_id: int
    satellite_id: int | None = Field(None, description="Satellite narrowing the post scope")
    title: str = Field(..., min_length=1, max_length=250)
    body: str = Field(..., max_length=40000, description="Markdown content")
    is_pinned: bool = Field(False, description="Pinning requires moderator rights")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    sphere_id: int
    satellite_id: int | None
    creator_id: int
    title: str
    body: str
    is_pinned: bool
    num_comments: int
    score: int
    score_minus: int
    recommended_score: float
    trending_score: float
    create_timestamp: datetime
    edit_timestamp: datetime | None
    scoring_timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class PostView(BaseModel):
    """A post together with the caller's own vote on it."""

    post: PostResponse
    vote: VoteOut | None = None
