# src/sphere_stage/models/user.py
"""SQLAlchemy models for user identities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from sphere_stage.db.session import Base
from sphere_stage.db.time import utcnow


class User(Base):
    """Account known to the forum.

    Authentication happens upstream; this row only carries what ranking and
    moderation need to know about the caller.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Global moderator: may moderate any sphere.
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
