"""Row builders shaped like the backend's table responses."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def make_post(post_id: int, *, title: str = "Hello", day: int = 1, **extra: Any) -> dict[str, Any]:
    """Return a ``posts`` row."""
    return {
        "id": post_id,
        "title": title,
        "description": f"Body of {title}",
        "image_url": None,
        "created_at": datetime(2024, 5, day, 12, 0, tzinfo=timezone.utc).isoformat(),
        **extra,
    }


def make_comment(comment_id: int, post_id: int, content: str = "Nice") -> dict[str, Any]:
    """Return a ``comments`` row."""
    return {
        "id": comment_id,
        "post_id": post_id,
        "content": content,
        "created_at": datetime(2024, 5, 2, 8, comment_id % 60, tzinfo=timezone.utc).isoformat(),
    }
