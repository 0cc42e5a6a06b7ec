"""Error responses: sanitized 500s and complete validation error lists."""

import asyncio
import json
import logging
import sqlite3

from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from starlette.requests import Request

from blog_posts_api.app.core.error_handlers import request_validation_error_handler
from blog_posts_api.app.core.exceptions import StoreError
from blog_posts_api.app.main import create_app
from blog_posts_api.app.services.blog_post_service import InMemoryBlogPostStore


class BrokenStore(InMemoryBlogPostStore):
    async def find_all(self):
        raise StoreError("disk on fire at /var/lib/secret.db")

    async def find_by_id(self, post_id):
        raise sqlite3.OperationalError("database is locked")

    async def ping(self):
        return False


def test_store_error_is_reported_without_details(caplog):
    client = TestClient(create_app(store=BrokenStore()))

    with caplog.at_level(logging.ERROR):
        res = client.get("/posts")

    assert res.status_code == 500
    detail = res.json()["detail"]
    assert "Error ID:" in detail
    assert "secret.db" not in detail
    assert "secret.db" in caplog.text


def test_raw_database_error_is_a_500():
    client = TestClient(create_app(store=BrokenStore()))

    res = client.get("/posts/anything")

    assert res.status_code == 500
    assert "locked" not in res.json()["detail"]


def test_health_reports_degraded_store():
    client = TestClient(create_app(store=BrokenStore()))

    res = client.get("/health")

    assert res.json() == {"status": "degraded", "service": "blog-posts", "database": "disconnected"}


def test_validation_errors_on_one_field_are_all_reported():
    request = Request({"type": "http", "method": "POST", "path": "/posts", "headers": [], "query_string": b""})
    exc = RequestValidationError(
        [
            {"loc": ("body", "title"), "msg": "String should have at least 1 character", "type": "string_too_short"},
            {"loc": ("body", "title"), "msg": "Value error, looks like spam", "type": "value_error"},
        ]
    )

    response = asyncio.run(request_validation_error_handler(request, exc))

    assert response.status_code == 400
    assert json.loads(response.body)["errors"] == [
        {"field": "title", "msg": "String should have at least 1 character"},
        {"field": "title", "msg": "Value error, looks like spam"},
    ]


def test_validation_errors_list_every_missing_field():
    client = TestClient(create_app(store=InMemoryBlogPostStore()))

    res = client.post("/posts", json={"author": {}})

    assert res.status_code == 400
    fields = [error["field"] for error in res.json()["errors"]]
    assert sorted(fields) == ["author.firstName", "author.lastName", "content", "title"]
