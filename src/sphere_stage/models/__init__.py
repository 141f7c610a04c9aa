# src/sphere_stage/models/__init__.py
"""SQLAlchemy models for the Sphere Stage application."""

from .comment import Comment
from .moderation import UserBan
from .post import Post
from .sphere import Satellite, Sphere, SphereModerator
from .user import User
from .vote import Vote

__all__ = [
    "Comment",
    "UserBan",
    "Post",
    "Satellite", "Sphere", "SphereModerator",
    "User",
    "Vote",
]
