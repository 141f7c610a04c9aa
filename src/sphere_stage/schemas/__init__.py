# src/sphere_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentNodeOut, CommentResponse, CommentUpdate
from .moderation import BanRequest, ModerateRequest, ModerationResponse, UserBanResponse
from .post import PostCreate, PostResponse, PostView
from .sphere import SatelliteCreate, SatelliteResponse, SphereCreate, SphereResponse
from .vote import PriorVoteIn, VoteOut, VoteRequest, VoteResponse

__all__ = [
    "CommentCreate", "CommentNodeOut", "CommentResponse", "CommentUpdate",
    "BanRequest", "ModerateRequest", "ModerationResponse", "UserBanResponse",
    "PostCreate", "PostResponse", "PostView",
    "SatelliteCreate", "SatelliteResponse", "SphereCreate", "SphereResponse",
    "PriorVoteIn", "VoteOut", "VoteRequest", "VoteResponse",
]
