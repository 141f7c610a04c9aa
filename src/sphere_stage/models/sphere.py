"""SQLAlchemy models for spheres (sub-communities) and their satellites."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from sphere_stage.db.session import Base
from sphere_stage.db.time import utcnow


class Sphere(Base):
    """User-created sub-community grouping posts."""

    __tablename__ = "spheres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Handle used in URLs.
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    description_md: Mapped[str | None] = mapped_column(Text, nullable=True)
    creator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class SphereModerator(Base):
    """Join table granting moderate permission inside one sphere."""

    __tablename__ = "sphere_moderators"

    sphere_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("spheres.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )


class Satellite(Base):
    """Secondary board inside a sphere narrowing post scope."""

    __tablename__ = "satellites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sphere_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("spheres.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
