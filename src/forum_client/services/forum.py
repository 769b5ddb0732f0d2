"""Forum use cases shared by the list and post views.

Both views build their vote state through :class:`VoteBoard` and their
comment counts through :func:`compute_comment_counts`, so the two screens
always agree on the numbers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from forum_client.schemas.comment import CommentResponse
from forum_client.schemas.post import (
    PostDetailResponse,
    PostResponse,
    PostSummary,
    TallyResponse,
)
from forum_client.schemas.vote import VoteResponse
from forum_client.services.comments import compute_comment_counts
from forum_client.services.storage import ObjectStorage, get_object_storage
from forum_client.services.store import RemoteStore, StoreError, get_remote_store
from forum_client.services.votes import Direction, PostId, Tally, VoteBoard, VoteTransition

# Configure logger for this module
logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class ForumSort(str, Enum):
    """Orderings offered by the forum list."""

    NEWEST = "newest"
    MOST_COMMENTS = "most_comments"
    MOST_UPVOTES = "most_upvotes"


class PostNotFoundError(LookupError):
    """Raised when a post does not exist in the remote store."""


@dataclass(frozen=True)
class ImageUpload:
    """An image attached to a new post."""

    filename: str | None
    content_type: str | None
    data: bytes


def _tally_response(tally: Tally) -> TallyResponse:
    return TallyResponse(**tally.as_dict())


def _created_at(summary: PostSummary) -> datetime:
    created = summary.post.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def sort_summaries(summaries: list[PostSummary], sort: ForumSort) -> list[PostSummary]:
    """Order list entries; ties keep their incoming order."""
    if sort is ForumSort.MOST_COMMENTS:
        return sorted(summaries, key=lambda s: s.comment_count, reverse=True)
    if sort is ForumSort.MOST_UPVOTES:
        return sorted(summaries, key=lambda s: s.tally.total, reverse=True)
    return sorted(summaries, key=_created_at, reverse=True)


class ForumService:
    """Orchestrates remote store and storage calls for the forum screens."""

    def __init__(
        self,
        store: RemoteStore | None = None,
        storage: ObjectStorage | None = None,
    ) -> None:
        self.store = store or get_remote_store()
        self.storage = storage or get_object_storage()

    async def _get_post_or_raise(self, post_id: PostId) -> dict:
        post = await self.store.get_post(post_id)
        if post is None:
            raise PostNotFoundError(f"Post {post_id} not found")
        return post

    async def list_forum(
        self,
        voter: str,
        sort: ForumSort = ForumSort.NEWEST,
    ) -> list[PostSummary]:
        """Return every post with its tally, the voter's vote and comment count."""
        posts = await self.store.list_posts()
        if not posts:
            return []

        post_ids = [post["id"] for post in posts]
        votes = await self.store.list_votes(post_ids)
        comment_rows = await self.store.list_comment_post_ids(post_ids)

        board = VoteBoard.from_votes(votes, post_ids, voter)
        comment_counts = compute_comment_counts(comment_rows, post_ids)

        summaries = [
            PostSummary(
                post=PostResponse.model_validate(post),
                tally=_tally_response(board.tally(post["id"])),
                user_vote=board.user_vote(post["id"]),
                comment_count=comment_counts[post["id"]],
            )
            for post in posts
        ]
        return sort_summaries(summaries, sort)

    async def get_post_detail(self, post_id: PostId, voter: str) -> PostDetailResponse:
        """Return a post with its comments, oldest first, and its vote state."""
        post = await self._get_post_or_raise(post_id)
        comments = await self.store.list_comments(post_id)
        votes = await self.store.list_votes([post_id])

        board = VoteBoard.from_votes(votes, [post_id], voter)
        comment_counts = compute_comment_counts(comments, [post_id])

        return PostDetailResponse(
            post=PostResponse.model_validate(post),
            tally=_tally_response(board.tally(post_id)),
            user_vote=board.user_vote(post_id),
            comment_count=comment_counts[post_id],
            comments=[CommentResponse.model_validate(comment) for comment in comments],
        )

    async def list_comments(self, post_id: PostId) -> list[CommentResponse]:
        rows = await self.store.list_comments(post_id)
        return [CommentResponse.model_validate(row) for row in rows]

    async def create_post(
        self,
        *,
        title: str,
        description: str,
        image: ImageUpload | None = None,
    ) -> PostResponse:
        """Create a post, uploading its image first when one is attached.

        ``title`` and ``description`` are expected to be validated already
        (see :class:`forum_client.schemas.post.PostCreate`).
        """
        image_url = None
        if image is not None:
            image_url = await self.storage.upload_image(
                image.filename, image.content_type, image.data
            )

        row = await self.store.insert_post(
            title=title,
            description=description,
            image_url=image_url,
        )
        return PostResponse.model_validate(row)

    async def add_comment(self, post_id: PostId, content: str) -> CommentResponse:
        await self._get_post_or_raise(post_id)
        row = await self.store.insert_comment(post_id=post_id, content=content)
        return CommentResponse.model_validate(row)

    async def delete_comment(self, comment_id: PostId) -> None:
        await self.store.delete_comment(comment_id)

    async def delete_post(self, post_id: PostId) -> None:
        """Delete a post after removing its comments.

        A failed comment cleanup is logged and the post delete still goes
        ahead; a failed post delete raises.
        """
        try:
            await self.store.delete_comments_for_post(post_id)
        except StoreError as exc:
            logger.warning("Error deleting comments for post %s: %s", post_id, exc)

        await self.store.delete_post(post_id)
        logger.info("Deleted post %s", post_id)

    async def get_user_vote(self, post_id: PostId, voter: str) -> Direction | None:
        votes = await self.store.list_votes([post_id])
        return VoteBoard.from_votes(votes, [post_id], voter).user_vote(post_id)

    async def cast_vote(
        self,
        post_id: PostId,
        voter: str,
        direction: Direction,
    ) -> VoteResponse:
        """Toggle or switch the voter's vote on a post.

        The tally returned reflects the change applied to the freshly fetched
        votes; if the remote mutation fails the error propagates and nothing
        is reported as changed.
        """
        await self._get_post_or_raise(post_id)
        votes = await self.store.list_votes([post_id])
        board = VoteBoard.from_votes(votes, [post_id], voter)

        async def mutate(transition: VoteTransition) -> None:
            if transition.action == "remove":
                await self.store.delete_vote(post_id=post_id, voter=voter)
            else:
                await self.store.upsert_vote(
                    post_id=post_id,
                    voter=voter,
                    direction=direction,
                )

        transition = await board.cast(post_id, direction, mutate)
        return VoteResponse(
            post_id=post_id,
            action=transition.action,
            user_vote=transition.resulting_vote,
            tally=_tally_response(board.tally(post_id)),
        )


def get_forum_service() -> ForumService:
    """Return a forum service bound to the shared backend clients."""
    return ForumService()
