"""Shared API dependencies for the forum endpoints."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, Request, Response, status

from forum_client.core.settings import settings
from forum_client.services.backend import ForumBackendError
from forum_client.services.forum import ForumService, get_forum_service
from forum_client.services.identity import (
    USER_IDENTIFIER_KEY,
    IdentityResolver,
    get_identity_resolver,
)


def get_forum_service_dep() -> ForumService:
    """Return the forum service."""
    return get_forum_service()


def get_identity_resolver_dep() -> IdentityResolver:
    """Return the voter identity resolver."""
    return get_identity_resolver()


IdentityResolverDep = Annotated[IdentityResolver, Depends(get_identity_resolver_dep)]


async def get_voter_identity(
    request: Request,
    response: Response,
    resolver: IdentityResolverDep,
) -> str:
    """Resolve the identifier the current caller votes under.

    Resolution never fails; see :class:`IdentityResolver`. A newly issued
    fallback token is handed back to the caller as a cookie.
    """
    peer = request.client.host if request.client else None
    identity = resolver.resolve(request.headers, peer, request.cookies)
    if identity.issued_token:
        response.set_cookie(
            USER_IDENTIFIER_KEY,
            identity.issued_token,
            max_age=settings.voter_cookie_max_age_seconds,
            httponly=True,
            samesite="lax",
        )
    return identity.identifier


# Type aliases for dependency injection
ForumServiceDep = Annotated[ForumService, Depends(get_forum_service_dep)]
VoterDep = Annotated[str, Depends(get_voter_identity)]


def raise_backend_error(action: str, exc: ForumBackendError) -> NoReturn:
    """Turn a failed backend call into a user-visible notice.

    Args:
        action: What the user tried to do, e.g. ``"delete post"``
        exc: The backend failure

    Raises:
        HTTPException: Always, with status 502
    """
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to {action}",
    ) from exc


def raise_post_not_found() -> NoReturn:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
