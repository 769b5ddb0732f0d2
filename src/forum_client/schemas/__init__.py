# src/forum_client/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .post import PostCreate, PostDetailResponse, PostResponse, PostSummary, TallyResponse
from .user import IdentityResponse, SignUpRequest
from .vote import VoteCreate, VoteResponse

__all__ = [
    "CommentCreate", "CommentResponse",
    "PostCreate", "PostDetailResponse", "PostResponse", "PostSummary", "TallyResponse",
    "IdentityResponse", "SignUpRequest",
    "VoteCreate", "VoteResponse",
]
