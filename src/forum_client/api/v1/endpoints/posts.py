# src/forum_client/api/v1/endpoints/posts.py
"""Forum post endpoints: the list view, the post page and the create form."""

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError

from forum_client.core.settings import settings
from forum_client.schemas.comment import CommentCreate, CommentResponse
from forum_client.schemas.post import PostCreate, PostDetailResponse, PostResponse, PostSummary
from forum_client.services.backend import ForumBackendError
from forum_client.services.forum import ForumSort, ImageUpload, PostNotFoundError
from forum_client.services.storage import ImageValidationError, validate_image

from ..dependencies import (
    ForumServiceDep,
    VoterDep,
    raise_backend_error,
    raise_post_not_found,
)

router = APIRouter(prefix="/forum", tags=["forum"])

# HTTP status codes
HTTP_CONTENT_TOO_LARGE = 413
HTTP_UNPROCESSABLE_CONTENT = 422


def _validate_post_form(title: str, description: str) -> PostCreate:
    try:
        return PostCreate(title=title, description=description)
    except ValidationError as err:
        raise HTTPException(
            status_code=HTTP_UNPROCESSABLE_CONTENT,
            detail="Please fill in both title and description",
        ) from err


async def _read_image(image: UploadFile | None) -> ImageUpload | None:
    # Browsers submit an empty, unnamed part when no file is chosen.
    if image is None or not image.filename:
        return None
    if image.size is not None:
        validate_image(image.content_type, image.size)
    # At most one byte past the limit is buffered.
    data = await image.read(settings.max_image_bytes + 1)
    validate_image(image.content_type, len(data))
    return ImageUpload(filename=image.filename, content_type=image.content_type, data=data)


def _image_error(exc: ImageValidationError) -> HTTPException:
    if exc.reason == "size":
        return HTTPException(status_code=HTTP_CONTENT_TOO_LARGE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc))


@router.get("/posts", response_model=list[PostSummary])
async def list_posts(
    forum: ForumServiceDep,
    voter: VoterDep,
    sort: ForumSort = Query(ForumSort.NEWEST, description="Ordering of the list"),
) -> list[PostSummary]:
    """List every post with its vote tally, comment count and the caller's vote."""
    try:
        return await forum.list_forum(voter, sort)
    except ForumBackendError as exc:
        raise_backend_error("load posts", exc)


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    forum: ForumServiceDep,
    title: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    image: Annotated[UploadFile | None, File()] = None,
) -> PostResponse:
    """Create a post, optionally with an image.

    Title and description are validated, and the image checked for type and
    size, before anything is sent to the backend.
    """
    post_data = _validate_post_form(title, description)

    try:
        upload = await _read_image(image)
        return await forum.create_post(
            title=post_data.title,
            description=post_data.description,
            image=upload,
        )
    except ImageValidationError as exc:
        raise _image_error(exc) from exc
    except ForumBackendError as exc:
        raise_backend_error("create post", exc)


@router.get("/posts/{post_id}", response_model=PostDetailResponse)
async def get_post(
    post_id: int,
    forum: ForumServiceDep,
    voter: VoterDep,
) -> PostDetailResponse:
    """Get a post with its comments and vote state."""
    try:
        return await forum.get_post_detail(post_id, voter)
    except PostNotFoundError:
        raise_post_not_found()
    except ForumBackendError as exc:
        raise_backend_error("load post", exc)


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, forum: ForumServiceDep) -> None:
    """Delete a post and its comments."""
    try:
        await forum.delete_post(post_id)
    except ForumBackendError as exc:
        raise_backend_error("delete post", exc)


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: int, forum: ForumServiceDep) -> list[CommentResponse]:
    """Return a post's comments, oldest first."""
    try:
        return await forum.list_comments(post_id)
    except ForumBackendError as exc:
        raise_backend_error("load comments", exc)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    comment: CommentCreate,
    forum: ForumServiceDep,
) -> CommentResponse:
    """Add a comment to a post."""
    try:
        return await forum.add_comment(post_id, comment.content)
    except PostNotFoundError:
        raise_post_not_found()
    except ForumBackendError as exc:
        raise_backend_error("add comment", exc)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: int, forum: ForumServiceDep) -> None:
    """Delete a single comment."""
    try:
        await forum.delete_comment(comment_id)
    except ForumBackendError as exc:
        raise_backend_error("delete comment", exc)
