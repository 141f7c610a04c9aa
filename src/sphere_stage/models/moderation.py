# src/sphere_stage/models/moderation.py
"""Models tracking bans issued by moderators."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from sphere_stage.db.session import Base
from sphere_stage.db.time import utcnow


class UserBan(Base):
    """Ban preventing a user from voting or publishing.

    ``sphere_id`` NULL means a platform-wide ban; ``until_timestamp`` NULL
    means permanent. Lifting a ban sets ``delete_timestamp``.
    """

    __tablename__ = "user_bans"
    __table_args__ = (Index("ix_user_bans_user_id", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    sphere_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("spheres.id"),
        nullable=True,
    )
    # Content that led to the ban, kept for audit.
    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("posts.id"), nullable=False)
    comment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comments.id"),
        nullable=True,
    )
    moderator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    until_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    create_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    delete_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
