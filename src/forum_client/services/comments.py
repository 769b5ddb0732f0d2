"""Comment count aggregation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from forum_client.services.votes import PostId


def compute_comment_counts(
    comments: Iterable[Mapping[str, object]],
    post_ids: Iterable[PostId],
) -> dict[PostId, int]:
    """Count comments per requested post, keyed by ``post_id``.

    Every requested post starts at zero; comments for other posts are ignored.
    """
    counts: dict[PostId, int] = {post_id: 0 for post_id in post_ids}
    for comment in comments:
        post_id = comment.get("post_id")
        if post_id in counts:
            counts[post_id] += 1  # type: ignore[index]
    return counts
