"""Image uploads to the backend's object storage."""

from __future__ import annotations

import logging
import secrets
import string
from pathlib import PurePosixPath

import httpx

from forum_client.core.settings import settings
from forum_client.services.backend import (
    BackendConfig,
    BackendHttpClient,
    ForumBackendError,
    load_backend_config,
)

# Configure logger for this module
logger = logging.getLogger(__name__)

_OBJECT_ID_ALPHABET = string.ascii_lowercase + string.digits
_OBJECT_ID_LENGTH = 13


class StorageError(ForumBackendError):
    """Raised when an upload to object storage fails."""


class ImageValidationError(ValueError):
    """Raised when a file is rejected before upload.

    ``reason`` is ``"type"`` for a non-image MIME type and ``"size"`` for a
    file over the size limit.
    """

    def __init__(self, message: str, *, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


def validate_image(content_type: str | None, size: int, *, max_bytes: int | None = None) -> None:
    """Reject non-image MIME types and oversized files.

    Raises:
        ImageValidationError: If the file may not be uploaded.
    """
    limit = settings.max_image_bytes if max_bytes is None else max_bytes
    if not content_type or not content_type.lower().startswith("image/"):
        raise ImageValidationError("Please select an image file", reason="type")
    if size > limit:
        raise ImageValidationError(
            f"Image must be smaller than {limit // (1024 * 1024)} MB",
            reason="size",
        )


def build_object_path(filename: str | None) -> str:
    """Return a unique storage path keeping the original file extension."""
    object_id = "".join(secrets.choice(_OBJECT_ID_ALPHABET) for _ in range(_OBJECT_ID_LENGTH))
    suffix = PurePosixPath(filename or "").suffix.lower()
    return f"{object_id}{suffix}"


class ObjectStorage(BackendHttpClient):
    """Uploads post images into a public bucket."""

    error_class = StorageError

    def __init__(
        self,
        config: BackendConfig | None = None,
        *,
        bucket: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config or load_backend_config(settings.storage_url), transport=transport)
        self.bucket = bucket or settings.storage_bucket

    def public_url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/object/public/{self.bucket}/{path}"

    async def upload_image(self, filename: str | None, content_type: str | None, data: bytes) -> str:
        """Validate and upload an image, returning its public URL."""
        validate_image(content_type, len(data))

        path = build_object_path(filename)
        await self._request(
            self.RequestParams(
                method="POST",
                path=f"/object/{self.bucket}/{path}",
                operation="upload image",
                content=data,
                headers={"Content-Type": content_type or "application/octet-stream"},
            )
        )
        logger.info("Uploaded image %s (%d bytes)", path, len(data))
        return self.public_url(path)


class _ObjectStorageSingleton:
    """Singleton wrapper for ObjectStorage."""

    _instance: ObjectStorage | None = None

    @classmethod
    def get_instance(cls) -> ObjectStorage:
        """Get or create the singleton ObjectStorage instance."""
        if cls._instance is None:
            cls._instance = ObjectStorage()
        return cls._instance


def get_object_storage() -> ObjectStorage:
    """Return a singleton object storage instance."""
    return _ObjectStorageSingleton.get_instance()
