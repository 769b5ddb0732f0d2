# src/forum_client/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from .post import TallyResponse


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    post_id: int
    direction: Literal[-1, 1] = Field(..., description="1 for upvote, -1 for downvote")


class VoteResponse(BaseModel):
    """Result of a vote click after the remote store accepted it."""

    post_id: int
    action: Literal["remove", "upsert"]
    user_vote: Literal[-1, 1] | None
    tally: TallyResponse
