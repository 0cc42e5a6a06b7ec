"""Shared fixtures: isolated stores, seeded data and HTTP clients."""

import asyncio
from collections.abc import Iterator
from typing import List

import pytest
from fastapi.testclient import TestClient

from blog_posts_api.app.main import create_app
from blog_posts_api.app.schemas.blog_post import BlogPostRecord
from blog_posts_api.app.services.blog_post_service import (
    BlogPostStore,
    InMemoryBlogPostStore,
    SQLiteBlogPostStore,
)
from tests.factories import generate_record

SEED_COUNT = 10


def run(coro):
    """Drive a store coroutine from synchronous test code."""
    return asyncio.run(coro)


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteBlogPostStore:
    return SQLiteBlogPostStore(str(tmp_path / "blog_posts.db"))


@pytest.fixture
def memory_store() -> InMemoryBlogPostStore:
    return InMemoryBlogPostStore()


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path) -> Iterator[BlogPostStore]:
    if request.param == "sqlite":
        store = SQLiteBlogPostStore(str(tmp_path / "blog_posts.db"))
    else:
        store = InMemoryBlogPostStore()
    yield store
    # Tear down so no data survives into the next scenario.
    run(store.clear())


@pytest.fixture
def seeded_posts(store) -> List[BlogPostRecord]:
    return run(store.create_many([generate_record() for _ in range(SEED_COUNT)]))


@pytest.fixture
def client(store) -> Iterator[TestClient]:
    with TestClient(create_app(store=store)) as test_client:
        yield test_client
