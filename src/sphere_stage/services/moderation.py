# src/sphere_stage/services/moderation.py
"""Moderation services: ban checks, content moderation and user bans."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from sphere_stage.db.time import as_utc, utcnow
from sphere_stage.models import Comment, Post, SphereModerator, User, UserBan
from sphere_stage.services.errors import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


class BanKind(str, Enum):
    """How long a moderation action bans the content author."""

    NONE = "none"
    TIMED = "timed"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class BanDuration:
    """Explicit ban length: no ban, a number of days, or permanent."""

    kind: BanKind
    days: int | None = None

    def __post_init__(self) -> None:
        if self.kind is BanKind.TIMED:
            if self.days is None or self.days < 1:
                raise ValueError("Timed bans must last at least one day")
        elif self.days is not None:
            raise ValueError(f"{self.kind.value} bans do not take a duration")

    @classmethod
    def none(cls) -> BanDuration:
        return cls(BanKind.NONE)

    @classmethod
    def timed(cls, days: int) -> BanDuration:
        return cls(BanKind.TIMED, days)

    @classmethod
    def permanent(cls) -> BanDuration:
        return cls(BanKind.PERMANENT)

    def until(self, now: datetime) -> datetime | None:
        """Return the ban expiry, or None for a permanent ban."""
        if self.kind is BanKind.TIMED:
            if self.days is None:
                raise ValueError("Timed ban has no duration")
            return now + timedelta(days=self.days)
        return None


class ModerationGate:
    """Supplies ban and permission decisions and applies moderation actions."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self._clock = clock

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------
    def active_ban(self, user_id: int, sphere_id: int | None) -> UserBan | None:
        """Return a ban currently preventing ``user_id`` from acting in ``sphere_id``.

        Platform-wide bans (``sphere_id`` NULL) apply everywhere.
        """
        scope = UserBan.sphere_id.is_(None)
        if sphere_id is not None:
            scope = or_(scope, UserBan.sphere_id == sphere_id)

        bans = self.db.scalars(
            select(UserBan).where(
                UserBan.user_id == user_id,
                UserBan.delete_timestamp.is_(None),
                scope,
            )
        ).all()

        now = self._clock()
        for ban in bans:
            if ban.until_timestamp is None or as_utc(ban.until_timestamp) > now:
                return ban
        return None

    def authorize_publish(self, user_id: int, sphere_id: int) -> None:
        """Raise UnauthorizedError when the user is banned from the sphere or globally."""
        ban = self.active_ban(user_id, sphere_id)
        if ban is not None:
            scope = "globally" if ban.sphere_id is None else f"from sphere {sphere_id}"
            logger.debug("User %s is banned %s (ban %s)", user_id, scope, ban.id)
            raise UnauthorizedError(f"User is banned {scope}")

    def authorize_vote(self, voter_id: int, post_id: int) -> None:
        """Raise unless ``voter_id`` may vote on the post and its comments."""
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        self.authorize_publish(voter_id, post.sphere_id)

    def can_moderate(self, user: User, sphere_id: int) -> bool:
        """Return True for global admins and moderators of the sphere."""
        if user.is_admin:
            return True
        return self.is_sphere_moderator(user.id, sphere_id)

    def is_sphere_moderator(self, user_id: int, sphere_id: int) -> bool:
        return self.db.get(SphereModerator, (sphere_id, user_id)) is not None

    def require_moderator(self, user: User, sphere_id: int) -> None:
        if not self.can_moderate(user, sphere_id):
            raise UnauthorizedError("Moderator permission required")

    # ------------------------------------------------------------------
    # Moderation actions
    # ------------------------------------------------------------------
    def moderate_post(
        self,
        moderator: User,
        post_id: int,
        message: str,
        ban: BanDuration,
    ) -> tuple[Post, UserBan | None]:
        """Hide a post with a moderator message and optionally ban its author."""
        post = self.db.get(Post, post_id)
        if post is None or post.delete_timestamp is not None:
            raise NotFoundError("Post not found")
        self.require_moderator(moderator, post.sphere_id)

        user_ban = self.ban_user(
            moderator,
            user_id=post.creator_id,
            sphere_id=post.sphere_id,
            post_id=post.id,
            comment_id=None,
            ban=ban,
        )
        post.moderator_id = moderator.id
        post.moderator_message = message
        post.edit_timestamp = self._clock()
        self.db.commit()
        logger.info("Post %s moderated by user %s", post.id, moderator.id)
        return post, user_ban

    def moderate_comment(
        self,
        moderator: User,
        comment_id: int,
        message: str,
        ban: BanDuration,
    ) -> tuple[Comment, UserBan | None]:
        """Hide a comment with a moderator message and optionally ban its author."""
        comment = self.db.get(Comment, comment_id)
        if comment is None or comment.delete_timestamp is not None:
            raise NotFoundError("Comment not found")
        post = self.db.get(Post, comment.post_id)
        if post is None:
            raise NotFoundError("Post not found")
        self.require_moderator(moderator, post.sphere_id)

        user_ban = self.ban_user(
            moderator,
            user_id=comment.creator_id,
            sphere_id=post.sphere_id,
            post_id=post.id,
            comment_id=comment.id,
            ban=ban,
        )
        comment.moderator_id = moderator.id
        comment.moderator_message = message
        comment.edit_timestamp = self._clock()
        self.db.commit()
        logger.info("Comment %s moderated by user %s", comment.id, moderator.id)
        return comment, user_ban

    def ban_user(
        self,
        moderator: User,
        *,
        user_id: int,
        sphere_id: int,
        post_id: int,
        comment_id: int | None,
        ban: BanDuration,
    ) -> UserBan | None:
        """Record a sphere ban for ``user_id``; flushes but does not commit.

        Returns:
            The new ban row, or None when ``ban`` is ``BanDuration.none()``.

        Raises:
            UnauthorizedError: If the moderator lacks permission, targets
                themselves, or targets another moderator of the sphere.
        """
        if ban.kind is BanKind.NONE:
            return None

        self.require_moderator(moderator, sphere_id)
        if moderator.id == user_id:
            raise UnauthorizedError("Moderators cannot ban themselves")
        if self.is_sphere_moderator(user_id, sphere_id):
            raise UnauthorizedError("Cannot ban a moderator of this sphere")

        user_ban = UserBan(
            user_id=user_id,
            sphere_id=sphere_id,
            post_id=post_id,
            comment_id=comment_id,
            moderator_id=moderator.id,
            until_timestamp=ban.until(self._clock()),
        )
        self.db.add(user_ban)
        self.db.flush()
        logger.info(
            "User %s banned from sphere %s until %s",
            user_id,
            sphere_id,
            user_ban.until_timestamp or "forever",
        )
        return user_ban

    def lift_ban(self, moderator: User, ban_id: int) -> UserBan:
        """Lift an active ban."""
        user_ban = self.db.get(UserBan, ban_id)
        if user_ban is None or user_ban.delete_timestamp is not None:
            raise NotFoundError("Ban not found")
        if user_ban.sphere_id is None:
            if not moderator.is_admin:
                raise UnauthorizedError("Only admins can lift global bans")
        else:
            self.require_moderator(moderator, user_ban.sphere_id)

        user_ban.delete_timestamp = self._clock()
        self.db.commit()
        return user_ban
