# src/sphere_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .moderation import router as moderation_router
from .posts import router as posts_router
from .spheres import router as spheres_router
from .votes import router as votes_router

__all__ = [
    "comments_router",
    "moderation_router",
    "posts_router",
    "spheres_router",
    "votes_router",
]
