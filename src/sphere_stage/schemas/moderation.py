# src/sphere_stage/schemas/moderation.py
"""Moderation-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sphere_stage.services.moderation import BanDuration, BanKind


class BanRequest(BaseModel):
    """Ban attached to a moderation action."""

    kind: BanKind = BanKind.NONE
    days: int | None = Field(None, ge=1, description="Required for timed bans")

    @model_validator(mode="after")
    def _check_days(self) -> "BanRequest":
        if self.kind is BanKind.TIMED and self.days is None:
            raise ValueError("Timed bans require a number of days")
        if self.kind is not BanKind.TIMED and self.days is not None:
            raise ValueError(f"{self.kind.value} bans do not take a number of days")
        return self

    def to_duration(self) -> BanDuration:
        return BanDuration(self.kind, self.days)


class ModerateRequest(BaseModel):
    """Schema for hiding a post or comment."""

    message: str = Field(..., min_length=1, max_length=1000)
    ban: BanRequest = Field(default_factory=BanRequest)


class UserBanResponse(BaseModel):
    """Schema for ban information returned by the API."""

    id: int
    user_id: int
    sphere_id: int | None
    post_id: int
    comment_id: int | None
    moderator_id: int
    until_timestamp: datetime | None
    create_timestamp: datetime
    delete_timestamp: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ModerationResponse(BaseModel):
    """Outcome of a moderation action."""

    content_id: int
    moderator_id: int
    moderator_message: str
    ban: UserBanResponse | None = None
