# src/forum_client/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .comment import CommentResponse


class PostCreate(BaseModel):
    """Schema for creating a new post.

    Whitespace-only values are rejected the same way as empty ones, and the
    stored values are trimmed.
    """

    title: str = Field(..., description="Post title")
    description: str = Field(..., description="Post body")

    @field_validator("title", "description")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill in both title and description")
        return value


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    description: str
    image_url: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")


class TallyResponse(BaseModel):
    """Up/down/net vote counts for a post."""

    upvotes: int = 0
    downvotes: int = 0
    total: int = 0


class PostSummary(BaseModel):
    """A post as shown in the forum list."""

    post: PostResponse
    tally: TallyResponse
    user_vote: Literal[-1, 1] | None = None
    comment_count: int = 0


class PostDetailResponse(PostSummary):
    """A post with its comments, as shown on the post page."""

    comments: list[CommentResponse] = Field(default_factory=list)
