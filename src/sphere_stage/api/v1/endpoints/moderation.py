"""Moderation endpoints: hide content, ban authors and lift bans."""

from __future__ import annotations

from fastapi import APIRouter

from sphere_stage.api.v1.dependencies import CurrentUserDep, GateDep, raise_http_error
from sphere_stage.models import UserBan
from sphere_stage.schemas.moderation import ModerateRequest, ModerationResponse, UserBanResponse
from sphere_stage.services.errors import RankingError

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.post("/posts/{post_id}", response_model=ModerationResponse)
async def moderate_post(
    post_id: int,
    request: ModerateRequest,
    current_user: CurrentUserDep,
    gate: GateDep,
) -> ModerationResponse:
    """Hide a post from listings and optionally ban its author from the sphere."""
    try:
        post, user_ban = gate.moderate_post(
            current_user,
            post_id,
            request.message,
            request.ban.to_duration(),
        )
    except RankingError as err:
        raise_http_error(err)

    return ModerationResponse(
        content_id=post.id,
        moderator_id=current_user.id,
        moderator_message=request.message,
        ban=UserBanResponse.model_validate(user_ban) if user_ban is not None else None,
    )


@router.post("/comments/{comment_id}", response_model=ModerationResponse)
async def moderate_comment(
    comment_id: int,
    request: ModerateRequest,
    current_user: CurrentUserDep,
    gate: GateDep,
) -> ModerationResponse:
    """Hide a comment and optionally ban its author from the sphere."""
    try:
        comment, user_ban = gate.moderate_comment(
            current_user,
            comment_id,
            request.message,
            request.ban.to_duration(),
        )
    except RankingError as err:
        raise_http_error(err)

    return ModerationResponse(
        content_id=comment.id,
        moderator_id=current_user.id,
        moderator_message=request.message,
        ban=UserBanResponse.model_validate(user_ban) if user_ban is not None else None,
    )


@router.delete("/bans/{ban_id}", response_model=UserBanResponse)
async def lift_ban(
    ban_id: int,
    current_user: CurrentUserDep,
    gate: GateDep,
) -> UserBan:
    """Lift an active ban."""
    try:
        return gate.lift_ban(current_user, ban_id)
    except RankingError as err:
        raise_http_error(err)
