# src/forum_client/services/__init__.py
"""Business logic services for the forum client."""

from .forum import ForumService, ForumSort, ImageUpload, PostNotFoundError
from .identity import IdentityResolver, VoterIdentity
from .storage import ImageValidationError, ObjectStorage, StorageError
from .store import RemoteStore, StoreError
from .votes import Tally, VoteBoard, VoteRecord, VoteTransition

__all__ = [
    "ForumService",
    "ForumSort",
    "IdentityResolver",
    "ImageUpload",
    "ImageValidationError",
    "ObjectStorage",
    "PostNotFoundError",
    "RemoteStore",
    "StorageError",
    "StoreError",
    "Tally",
    "VoteBoard",
    "VoteRecord",
    "VoterIdentity",
    "VoteTransition",
]
