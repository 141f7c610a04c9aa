# src/sphere_stage/models/comment.py
"""SQLAlchemy models for comments attached to posts."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from sphere_stage.db.session import Base
from sphere_stage.db.time import utcnow


class Comment(Base):
    """Comment on a post, optionally replying to another comment."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_post_id", "post_id"),
        Index("ix_comments_parent_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("posts.id"), nullable=False)
    # Top-level comments have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comments.id"),
        nullable=True,
    )
    creator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score_minus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    create_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    edit_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delete_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    moderator_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=True,
    )
    moderator_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def is_visible(self) -> bool:
        """Return True when the comment is neither deleted nor moderated."""
        return self.delete_timestamp is None and self.moderator_id is None
