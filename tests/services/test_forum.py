# tests/services/test_forum.py
"""Tests for the forum use cases."""

from unittest.mock import call

import pytest

from forum_client.services.forum import ForumSort, ImageUpload, PostNotFoundError
from forum_client.services.storage import StorageError
from forum_client.services.store import StoreError
from forum_client.services.votes import VoteRecord
from tests.factories import make_comment, make_post

VOTER = "203.0.113.7"


@pytest.mark.asyncio
async def test_list_forum_combines_posts_votes_and_comments(forum_service, mock_store) -> None:
    mock_store.list_posts.return_value = [make_post(2, day=3), make_post(1, day=1)]
    mock_store.list_votes.return_value = [
        VoteRecord(1, VOTER, 1),
        VoteRecord(1, "other", 1),
        VoteRecord(2, "other", -1),
    ]
    mock_store.list_comment_post_ids.return_value = [{"post_id": 2}, {"post_id": 2}, {"post_id": 1}]

    summaries = await forum_service.list_forum(VOTER)

    assert [s.post.id for s in summaries] == [2, 1]
    by_id = {s.post.id: s for s in summaries}
    assert by_id[1].tally.model_dump() == {"upvotes": 2, "downvotes": 0, "total": 2}
    assert by_id[1].user_vote == 1
    assert by_id[1].comment_count == 1
    assert by_id[2].tally.total == -1
    assert by_id[2].user_vote is None
    assert by_id[2].comment_count == 2
    mock_store.list_votes.assert_awaited_once_with([2, 1])
    mock_store.list_comment_post_ids.assert_awaited_once_with([2, 1])


@pytest.mark.asyncio
async def test_list_forum_with_no_posts_skips_follow_up_queries(forum_service, mock_store) -> None:
    assert await forum_service.list_forum(VOTER) == []
    mock_store.list_votes.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("sort", "expected"),
    [
        (ForumSort.NEWEST, [3, 2, 1]),
        (ForumSort.MOST_COMMENTS, [1, 3, 2]),
        (ForumSort.MOST_UPVOTES, [2, 3, 1]),
    ],
)
async def test_list_forum_sorting(forum_service, mock_store, sort, expected) -> None:
    mock_store.list_posts.return_value = [make_post(1, day=1), make_post(3, day=9), make_post(2, day=5)]
    mock_store.list_votes.return_value = [
        VoteRecord(2, "a", 1),
        VoteRecord(2, "b", 1),
        VoteRecord(1, "a", -1),
    ]
    mock_store.list_comment_post_ids.return_value = [{"post_id": 1}, {"post_id": 1}, {"post_id": 3}]

    summaries = await forum_service.list_forum(VOTER, sort)

    assert [s.post.id for s in summaries] == expected


@pytest.mark.asyncio
async def test_get_post_detail(forum_service, mock_store) -> None:
    mock_store.get_post.return_value = make_post(5)
    mock_store.list_comments.return_value = [make_comment(1, 5), make_comment(2, 5, "Second")]
    mock_store.list_votes.return_value = [VoteRecord(5, VOTER, -1)]

    detail = await forum_service.get_post_detail(5, VOTER)

    assert detail.post.title == "Hello"
    assert [c.content for c in detail.comments] == ["Nice", "Second"]
    assert detail.comment_count == 2
    assert detail.user_vote == -1
    assert detail.tally.total == -1


@pytest.mark.asyncio
async def test_get_post_detail_missing_post(forum_service) -> None:
    with pytest.raises(PostNotFoundError):
        await forum_service.get_post_detail(404, VOTER)


@pytest.mark.asyncio
async def test_create_post_uploads_image_first(forum_service, mock_store, mock_storage) -> None:
    mock_store.insert_post.return_value = make_post(8, title="Pic")
    image = ImageUpload(filename="cat.png", content_type="image/png", data=b"png")

    post = await forum_service.create_post(title="Pic", description="Look", image=image)

    assert post.id == 8
    mock_storage.upload_image.assert_awaited_once_with("cat.png", "image/png", b"png")
    mock_store.insert_post.assert_awaited_once_with(
        title="Pic",
        description="Look",
        image_url=mock_storage.upload_image.return_value,
    )


@pytest.mark.asyncio
async def test_create_post_aborts_when_upload_fails(forum_service, mock_store, mock_storage) -> None:
    mock_storage.upload_image.side_effect = StorageError("Failed to upload image")
    image = ImageUpload(filename="cat.png", content_type="image/png", data=b"png")

    with pytest.raises(StorageError):
        await forum_service.create_post(title="Pic", description="Look", image=image)

    mock_store.insert_post.assert_not_awaited()


@pytest.mark.asyncio
async def test_add_comment_requires_existing_post(forum_service, mock_store) -> None:
    with pytest.raises(PostNotFoundError):
        await forum_service.add_comment(1, "Hi")
    mock_store.insert_comment.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_post_removes_comments_first(forum_service, mock_store) -> None:
    await forum_service.delete_post(3)

    assert mock_store.mock_calls[:2] == [
        call.delete_comments_for_post(3),
        call.delete_post(3),
    ]


@pytest.mark.asyncio
async def test_delete_post_continues_when_comment_cleanup_fails(forum_service, mock_store) -> None:
    mock_store.delete_comments_for_post.side_effect = StoreError("Failed to delete comments")

    await forum_service.delete_post(3)

    mock_store.delete_post.assert_awaited_once_with(3)


@pytest.mark.asyncio
async def test_delete_post_failure_propagates(forum_service, mock_store) -> None:
    mock_store.delete_post.side_effect = StoreError("Failed to delete post", status_code=500)

    with pytest.raises(StoreError):
        await forum_service.delete_post(3)


class TestCastVote:
    """Test vote transitions against the remote store."""

    @pytest.mark.asyncio
    async def test_fresh_vote_upserts(self, forum_service, mock_store):
        mock_store.get_post.return_value = make_post(1)

        result = await forum_service.cast_vote(1, VOTER, 1)

        assert result.action == "upsert"
        assert result.user_vote == 1
        assert result.tally.model_dump() == {"upvotes": 1, "downvotes": 0, "total": 1}
        mock_store.upsert_vote.assert_awaited_once_with(post_id=1, voter=VOTER, direction=1)

    @pytest.mark.asyncio
    async def test_same_direction_removes(self, forum_service, mock_store):
        mock_store.get_post.return_value = make_post(1)
        mock_store.list_votes.return_value = [VoteRecord(1, VOTER, -1)]

        result = await forum_service.cast_vote(1, VOTER, -1)

        assert result.action == "remove"
        assert result.user_vote is None
        assert result.tally.total == 0
        mock_store.delete_vote.assert_awaited_once_with(post_id=1, voter=VOTER)
        mock_store.upsert_vote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_switching_direction(self, forum_service, mock_store):
        mock_store.get_post.return_value = make_post(1)
        mock_store.list_votes.return_value = [
            VoteRecord(1, VOTER, 1),
            VoteRecord(1, "a", 1),
            VoteRecord(1, "b", 1),
            VoteRecord(1, "c", -1),
        ]

        result = await forum_service.cast_vote(1, VOTER, -1)

        assert result.action == "upsert"
        assert result.tally.model_dump() == {"upvotes": 2, "downvotes": 2, "total": 0}

    @pytest.mark.asyncio
    async def test_remote_failure_propagates(self, forum_service, mock_store):
        mock_store.get_post.return_value = make_post(1)
        mock_store.upsert_vote.side_effect = StoreError("Failed to vote", status_code=503)

        with pytest.raises(StoreError):
            await forum_service.cast_vote(1, VOTER, 1)

    @pytest.mark.asyncio
    async def test_missing_post(self, forum_service, mock_store):
        with pytest.raises(PostNotFoundError):
            await forum_service.cast_vote(1, VOTER, 1)
        mock_store.list_votes.assert_not_awaited()
