# src/forum_client/schemas/comment.py
"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    content: str = Field(..., description="Comment text")

    @field_validator("content")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a comment")
        return value


class CommentResponse(BaseModel):
    """Schema for comments returned by the API."""

    id: int
    post_id: int
    content: str
    created_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")
