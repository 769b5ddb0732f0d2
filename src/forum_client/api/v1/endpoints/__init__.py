# src/forum_client/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .posts import router as posts_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "posts_router",
    "votes_router",
    "users_router",
]
