# src/sphere_stage/models/post.py
"""SQLAlchemy models for posts and their ranking counters."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from sphere_stage.db.session import Base
from sphere_stage.db.time import utcnow


class Post(Base):
    """Top-level content published in a sphere.

    ``score`` is the raw vote tally; ``recommended_score`` (hot) and
    ``trending_score`` are derived from it with a time decay and refreshed
    by the ranking sweep.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_sphere_id", "sphere_id"),
        Index("ix_posts_create_timestamp", "create_timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sphere_id: Mapped[int] = mapped_column(Integer, ForeignKey("spheres.id"), nullable=False)
    satellite_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("satellites.id"),
        nullable=True,
    )
    creator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    num_comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Net upvotes minus downvotes.
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Count of active downvotes only.
    score_minus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recommended_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    trending_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    create_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    edit_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scoring_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    delete_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Moderation hides the post from every listing.
    moderator_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=True,
    )
    moderator_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def is_visible(self) -> bool:
        """Return True when the post is neither deleted nor moderated."""
        return self.delete_timestamp is None and self.moderator_id is None
