"""Client for the remote ``posts``, ``comments`` and ``votes`` tables.

The backend exposes each table through a PostgREST-style interface:
filters are query parameters such as ``id=eq.42`` and
``post_id=in.(1,2,3)``, and ordering is ``order=created_at.desc``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import httpx

from forum_client.core.settings import settings
from forum_client.services.backend import (
    BackendConfig,
    BackendHttpClient,
    ForumBackendError,
    load_backend_config,
)
from forum_client.services.votes import Direction, PostId, VoteRecord

# Configure logger for this module
logger = logging.getLogger(__name__)

Row = dict[str, Any]

_RETURN_REPRESENTATION = {"Prefer": "return=representation"}
_MERGE_DUPLICATES = {"Prefer": "resolution=merge-duplicates,return=minimal"}
_RESERVED_FILTER_CHARS = frozenset(',.:()" ')


class StoreError(ForumBackendError):
    """Raised when a table operation against the backend fails."""


def _filter_value(value: int | str) -> str:
    text = str(value)
    if any(char in _RESERVED_FILTER_CHARS for char in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def eq(value: int | str) -> str:
    """Return a PostgREST equality filter."""
    return f"eq.{value}"


def in_list(values: Iterable[int | str]) -> str:
    """Return a PostgREST membership filter, quoting values that need it."""
    return "in.(" + ",".join(_filter_value(value) for value in values) + ")"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RemoteStore(BackendHttpClient):
    """Table CRUD against the hosted backend."""

    error_class = StoreError

    def __init__(
        self,
        config: BackendConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config or load_backend_config(settings.rest_url), transport=transport)

    async def _select(self, table: str, operation: str, **params: str) -> list[Row]:
        response = await self._request(
            self.RequestParams(method="GET", path=f"/{table}", operation=operation, params=params)
        )
        try:
            rows = response.json()
        except ValueError as exc:
            raise StoreError(f"Failed to {operation}: malformed response") from exc
        if not isinstance(rows, list):
            raise StoreError(f"Failed to {operation}: unexpected response shape")
        return rows

    async def _insert(self, table: str, operation: str, row: Row) -> Row:
        response = await self._request(
            self.RequestParams(
                method="POST",
                path=f"/{table}",
                operation=operation,
                json_data=[row],
                headers=_RETURN_REPRESENTATION,
            )
        )
        try:
            rows = response.json()
        except ValueError as exc:
            raise StoreError(f"Failed to {operation}: malformed response") from exc
        if not isinstance(rows, list):
            raise StoreError(f"Failed to {operation}: unexpected response shape")
        if not rows:
            raise StoreError(f"Failed to {operation}: backend returned no row")
        return rows[0]

    async def _delete(self, table: str, operation: str, **params: str) -> None:
        await self._request(
            self.RequestParams(method="DELETE", path=f"/{table}", operation=operation, params=params)
        )

    # Posts

    async def list_posts(self) -> list[Row]:
        """Return every post, newest first."""
        return await self._select("posts", "fetch posts", select="*", order="created_at.desc")

    async def get_post(self, post_id: PostId) -> Row | None:
        """Return a single post, or None when it does not exist."""
        rows = await self._select("posts", "fetch post", select="*", id=eq(post_id))
        return rows[0] if rows else None

    async def insert_post(
        self,
        *,
        title: str,
        description: str,
        image_url: str | None = None,
    ) -> Row:
        row: Row = {
            "title": title,
            "description": description,
            "created_at": _utcnow_iso(),
        }
        if image_url:
            row["image_url"] = image_url
        post = await self._insert("posts", "create post", row)
        logger.info("Created post %s", post.get("id"))
        return post

    async def delete_post(self, post_id: PostId) -> None:
        await self._delete("posts", "delete post", id=eq(post_id))

    # Comments

    async def list_comments(self, post_id: PostId) -> list[Row]:
        """Return a post's comments, oldest first."""
        return await self._select(
            "comments",
            "fetch comments",
            select="*",
            post_id=eq(post_id),
            order="created_at.asc",
        )

    async def list_comment_post_ids(self, post_ids: Iterable[PostId]) -> list[Row]:
        """Return one ``{"post_id": ...}`` row per comment on the given posts."""
        ids = list(post_ids)
        if not ids:
            return []
        return await self._select(
            "comments",
            "fetch comment counts",
            select="post_id",
            post_id=in_list(ids),
        )

    async def insert_comment(self, *, post_id: PostId, content: str) -> Row:
        return await self._insert(
            "comments",
            "add comment",
            {"post_id": post_id, "content": content, "created_at": _utcnow_iso()},
        )

    async def delete_comment(self, comment_id: PostId) -> None:
        await self._delete("comments", "delete comment", id=eq(comment_id))

    async def delete_comments_for_post(self, post_id: PostId) -> None:
        await self._delete("comments", "delete comments", post_id=eq(post_id))

    # Votes

    async def list_votes(self, post_ids: Iterable[PostId]) -> list[VoteRecord]:
        """Return all vote records for the given posts, oldest row first."""
        ids = list(post_ids)
        if not ids:
            return []
        rows = await self._select(
            "votes",
            "fetch votes",
            select="post_id,vote_type,user_ip",
            post_id=in_list(ids),
            order="id.asc",
        )
        return [VoteRecord.from_row(row) for row in rows]

    async def upsert_vote(self, *, post_id: PostId, voter: str, direction: Direction) -> None:
        """Insert or replace the voter's vote on a post."""
        await self._request(
            self.RequestParams(
                method="POST",
                path="/votes",
                operation="vote",
                json_data=[{"post_id": post_id, "user_ip": voter, "vote_type": direction}],
                params={"on_conflict": "post_id,user_ip"},
                headers=_MERGE_DUPLICATES,
            )
        )

    async def delete_vote(self, *, post_id: PostId, voter: str) -> None:
        await self._delete("votes", "remove vote", post_id=eq(post_id), user_ip=eq(voter))


class _RemoteStoreSingleton:
    """Singleton wrapper for RemoteStore."""

    _instance: RemoteStore | None = None

    @classmethod
    def get_instance(cls) -> RemoteStore:
        """Get or create the singleton RemoteStore instance."""
        if cls._instance is None:
            cls._instance = RemoteStore()
        return cls._instance


def get_remote_store() -> RemoteStore:
    """Return a singleton remote store instance."""
    return _RemoteStoreSingleton.get_instance()
