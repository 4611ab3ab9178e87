"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ErrorResponse
from .interaction import LikeRequest, ShareRequest, VoteRequest
from .post import (
    FeedResponse,
    PostActionResponse,
    PostCreate,
    PostDetail,
    PostEnvelope,
    PostListResponse,
    PostSummary,
)
from .user import UserCreate, UserEnvelope, UserReadyResponse, UserResponse

__all__ = [
    "ErrorResponse",
    "LikeRequest", "ShareRequest", "VoteRequest",
    "FeedResponse", "PostActionResponse", "PostCreate", "PostDetail",
    "PostEnvelope", "PostListResponse", "PostSummary",
    "UserCreate", "UserEnvelope", "UserReadyResponse", "UserResponse",
]
