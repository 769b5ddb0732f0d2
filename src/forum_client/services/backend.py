"""HTTP plumbing shared by the remote table and object storage clients.

The forum keeps no data of its own: posts, comments, votes and uploaded
images all live in a hosted backend. This module holds the connection
configuration, the error types and the base client that lazily opens an
``httpx.AsyncClient`` carrying the backend's API key headers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from forum_client.core.settings import settings

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300


class ForumBackendError(RuntimeError):
    """Base exception raised when a call to the hosted backend fails.

    Carries the HTTP status code when the backend answered at all.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class BackendConfig:
    """Immutable configuration for backend calls."""

    base_url: str
    api_key: str | None
    timeout_seconds: float


def load_backend_config(base_url: str) -> BackendConfig:
    """Build configuration object from global settings."""

    return BackendConfig(
        base_url=base_url,
        api_key=settings.backend_key,
        timeout_seconds=float(settings.http_timeout_seconds),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, Mapping):
        for key in ("message", "error", "msg", "hint"):
            if body.get(key):
                return str(body[key])
    return response.text


class BackendHttpClient:
    """Base HTTP client for one backend API surface."""

    error_class: type[ForumBackendError] = ForumBackendError

    def __init__(
        self,
        config: BackendConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    headers=self._build_auth_headers(),
                    transport=self._transport,
                )
        return self._client

    def _build_auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.config.api_key:
            headers["apikey"] = self.config.api_key
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    @dataclass
    class RequestParams:
        """Parameters for HTTP requests."""
        method: str
        path: str
        operation: str
        json_data: Any | None = None
        content: bytes | None = None
        params: Mapping[str, Any] | None = None
        headers: dict[str, str] | None = None

    async def _request(self, params: RequestParams) -> httpx.Response:
        client = await self._ensure_client()

        try:
            response = await client.request(
                params.method,
                params.path,
                json=params.json_data,
                content=params.content,
                params=params.params,
                headers=params.headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend request failed while trying to %s: %s", params.operation, exc)
            raise self.error_class(f"Failed to {params.operation}: {exc}") from exc

        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            message = _error_message(response)
            logger.warning(
                "Backend responded with %d while trying to %s: %s",
                response.status_code,
                params.operation,
                message,
            )
            raise self.error_class(
                f"Failed to {params.operation}: {message}",
                status_code=response.status_code,
            )

        return response

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""

        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
