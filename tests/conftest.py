# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("FORUM_BACKEND_URL", "http://backend.test")
os.environ.setdefault("FORUM_BACKEND_KEY", "test-anon-key")

from forum_client.api.v1 import dependencies
from forum_client.main import app as fastapi_app
from forum_client.services.forum import ForumService
from forum_client.services.storage import ObjectStorage
from forum_client.services.store import RemoteStore

TEST_VOTER = "203.0.113.7"


@pytest.fixture()
def mock_store() -> AsyncMock:
    """Remote store double with no rows by default."""
    store = AsyncMock(spec=RemoteStore)
    store.list_posts.return_value = []
    store.get_post.return_value = None
    store.list_comments.return_value = []
    store.list_comment_post_ids.return_value = []
    store.list_votes.return_value = []
    return store


@pytest.fixture()
def mock_storage() -> AsyncMock:
    """Object storage double returning a fixed public URL."""
    storage = AsyncMock(spec=ObjectStorage)
    storage.upload_image.return_value = "http://backend.test/storage/v1/object/public/post-images/abc.png"
    return storage


@pytest.fixture()
def forum_service(mock_store: AsyncMock, mock_storage: AsyncMock) -> ForumService:
    return ForumService(store=mock_store, storage=mock_storage)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def voter() -> str:
    return TEST_VOTER


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, forum_service: ForumService, voter: str) -> Iterator[None]:
    async def _voter_override() -> str:
        return voter

    app.dependency_overrides[dependencies.get_forum_service_dep] = lambda: forum_service
    app.dependency_overrides[dependencies.get_voter_identity] = _voter_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(dependencies.get_forum_service_dep, None)
        app.dependency_overrides.pop(dependencies.get_voter_identity, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
