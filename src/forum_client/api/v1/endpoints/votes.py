# src/forum_client/api/v1/endpoints/votes.py
"""Vote-related endpoints for the forum API."""

from fastapi import APIRouter, status

from forum_client.schemas.vote import VoteCreate, VoteResponse
from forum_client.services.backend import ForumBackendError
from forum_client.services.forum import PostNotFoundError

from ..dependencies import ForumServiceDep, VoterDep, raise_backend_error, raise_post_not_found

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("/", response_model=VoteResponse, status_code=status.HTTP_200_OK)
async def cast_vote(
    vote_data: VoteCreate,
    forum: ForumServiceDep,
    voter: VoterDep,
) -> VoteResponse:
    """Cast, switch or withdraw the caller's vote on a post.

    Voting the same direction twice withdraws the vote; voting the other
    direction replaces it.
    """
    try:
        return await forum.cast_vote(vote_data.post_id, voter, vote_data.direction)
    except PostNotFoundError:
        raise_post_not_found()
    except ForumBackendError as exc:
        raise_backend_error("vote", exc)


@router.get("/{post_id}/my-vote")
async def get_my_vote(
    post_id: int,
    forum: ForumServiceDep,
    voter: VoterDep,
) -> dict[str, int]:
    """Get the caller's vote on a specific post (0 when none)."""
    try:
        direction = await forum.get_user_vote(post_id, voter)
    except ForumBackendError as exc:
        raise_backend_error("load vote", exc)

    return {"direction": direction or 0}
