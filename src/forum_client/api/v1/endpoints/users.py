# src/forum_client/api/v1/endpoints/users.py
"""Voter identity and sign-up endpoints."""

from fastapi import APIRouter

from forum_client.schemas.user import IdentityResponse, SignUpRequest

from ..dependencies import VoterDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/identity", response_model=IdentityResponse)
async def get_identity(voter: VoterDep) -> IdentityResponse:
    """Return the identifier the caller's votes are recorded under."""
    return IdentityResponse(voter_identifier=voter)


@router.post("/sign-up")
async def sign_up(form: SignUpRequest) -> dict[str, str]:
    """Accept the sign-up form once the passwords match.

    Accounts are not stored; the forum has no authentication.
    """
    return {"status": "ok", "username": form.username}
