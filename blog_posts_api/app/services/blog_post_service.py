"""
Service layer for blog posts.

This module owns every persisted post.  ``BlogPostStore`` defines the
operations the HTTP layer depends on; two implementations are
provided:

* ``SQLiteBlogPostStore`` keeps posts in a SQLite database addressed
  by a connection string.  Blocking database work runs in a worker
  thread so the event loop keeps serving other requests, and every
  operation runs in its own transaction.
* ``InMemoryBlogPostStore`` keeps posts in a dictionary.  It has the
  same semantics and is meant for unit tests.

Records are created from ``title``, ``content`` and ``author_name``.
The store assigns ``id`` (an opaque hex string) and ``created_at``;
neither changes afterwards.

All queries use parameterized statements.  Column names that end up
in generated SQL come from ``UPDATABLE_FIELDS`` only.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from blog_posts_api.app.core.db import check_connection, connect, init_db
from blog_posts_api.app.core.exceptions import StoreError, ValidationError
from blog_posts_api.app.schemas.blog_post import BlogPostRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "content", "author_name")
UPDATABLE_FIELDS = frozenset(REQUIRED_FIELDS)


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_text(field: str, value: Any, errors: Dict[str, str]) -> None:
    if value is None:
        errors[field] = "Field required"
    elif not isinstance(value, str):
        errors[field] = "Must be a string"
    elif not value:
        errors[field] = "Must not be empty"


def validate_new_record(record: Mapping[str, Any]) -> Dict[str, str]:
    """Check a record before it is created and return its stored fields.

    Raises ``ValidationError`` if a required field is missing, empty or
    not a string, or if the caller tried to supply its own ``id``.
    """
    errors: Dict[str, str] = {}
    if record.get("id") is not None:
        errors["id"] = "Assigned by the store"
    for field in REQUIRED_FIELDS:
        _check_text(field, record.get(field), errors)
    if errors:
        raise ValidationError("Invalid blog post", errors)
    return {field: record[field] for field in REQUIRED_FIELDS}


def validate_changes(changes: Mapping[str, Any]) -> Dict[str, str]:
    """Check a partial update and drop fields that were not supplied.

    ``None`` means "not supplied".  Unknown fields are rejected so a
    typo never silently turns into a no-op.
    """
    errors: Dict[str, str] = {}
    cleaned: Dict[str, str] = {}
    for field, value in changes.items():
        if field not in UPDATABLE_FIELDS:
            errors[field] = "Cannot be updated"
            continue
        if value is None:
            continue
        _check_text(field, value, errors)
        cleaned[field] = value
    if errors:
        raise ValidationError("Invalid blog post update", errors)
    return cleaned


class BlogPostStore(abc.ABC):
    """Operations on the collection of persisted posts."""

    async def init(self) -> None:
        """Prepare the backing storage.  Safe to call more than once."""

    async def ping(self) -> bool:
        """Return True if the backing storage is reachable."""
        return True

    @abc.abstractmethod
    async def create(self, record: Mapping[str, Any]) -> BlogPostRecord:
        """Persist a new post and return it with its generated id."""

    @abc.abstractmethod
    async def create_many(self, records: Iterable[Mapping[str, Any]]) -> List[BlogPostRecord]:
        """Persist several posts at once.

        Either every record is stored or, if any record is invalid or
        the write fails, none is.
        """

    @abc.abstractmethod
    async def find_by_id(self, post_id: str) -> Optional[BlogPostRecord]:
        """Return the post with ``post_id`` or ``None``."""

    @abc.abstractmethod
    async def find_all(self) -> List[BlogPostRecord]:
        """Return every post.  Order is unspecified."""

    @abc.abstractmethod
    async def count(self) -> int:
        """Return the number of persisted posts."""

    @abc.abstractmethod
    async def update(self, post_id: str, changes: Mapping[str, Any]) -> Optional[BlogPostRecord]:
        """Apply ``changes`` to a post.

        Only supplied fields change.  Returns the updated post or
        ``None`` if no post has ``post_id``.
        """

    @abc.abstractmethod
    async def delete_by_id(self, post_id: str) -> bool:
        """Remove a post.  Returns whether a post was removed."""

    @abc.abstractmethod
    async def clear(self) -> int:
        """Remove every post and return how many were removed."""


class SQLiteBlogPostStore(BlogPostStore):
    """Post store backed by a SQLite database."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._initialised = False
        self._schema_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"SQLiteBlogPostStore({self.database_url!r})"

    def _ensure_schema(self) -> None:
        if self._initialised:
            return
        # Operations run in worker threads; only the first one migrates.
        with self._schema_lock:
            if not self._initialised:
                init_db(self.database_url)
                self._initialised = True

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection whose work is committed or rolled back as a unit."""
        try:
            self._ensure_schema()
            conn = connect(self.database_url)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open {self.database_url}: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreError(f"Blog post store operation failed: {exc}") from exc
        finally:
            conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> BlogPostRecord:
        return BlogPostRecord(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            author_name=row["author_name"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _select_one(conn: sqlite3.Connection, post_id: str) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM blog_posts WHERE id = ?", (post_id,)).fetchone()

    @staticmethod
    def _insert(conn: sqlite3.Connection, fields: Dict[str, str]) -> str:
        post_id = _new_id()
        conn.execute(
            """
            INSERT INTO blog_posts (id, title, content, author_name, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (post_id, fields["title"], fields["content"], fields["author_name"], _now()),
        )
        return post_id

    async def init(self) -> None:
        await asyncio.to_thread(self._ensure_schema)

    async def ping(self) -> bool:
        return await asyncio.to_thread(check_connection, self.database_url)

    async def create(self, record: Mapping[str, Any]) -> BlogPostRecord:
        fields = validate_new_record(record)
        return await asyncio.to_thread(self._create_sync, fields)

    def _create_sync(self, fields: Dict[str, str]) -> BlogPostRecord:
        with self._transaction() as conn:
            post_id = self._insert(conn, fields)
            row = self._select_one(conn, post_id)
        logger.info("Created blog post %s", post_id)
        return self._row_to_record(row)

    async def create_many(self, records: Iterable[Mapping[str, Any]]) -> List[BlogPostRecord]:
        # Validate everything up front so nothing is written for a bad batch.
        batch = [validate_new_record(record) for record in records]
        return await asyncio.to_thread(self._create_many_sync, batch)

    def _create_many_sync(self, batch: List[Dict[str, str]]) -> List[BlogPostRecord]:
        with self._transaction() as conn:
            ids = [self._insert(conn, fields) for fields in batch]
            rows = [self._select_one(conn, post_id) for post_id in ids]
        logger.info("Created %d blog posts", len(ids))
        return [self._row_to_record(row) for row in rows]

    async def find_by_id(self, post_id: str) -> Optional[BlogPostRecord]:
        return await asyncio.to_thread(self._find_by_id_sync, post_id)

    def _find_by_id_sync(self, post_id: str) -> Optional[BlogPostRecord]:
        with self._transaction() as conn:
            row = self._select_one(conn, post_id)
        if row is None:
            logger.debug("Blog post %s not found", post_id)
            return None
        return self._row_to_record(row)

    async def find_all(self) -> List[BlogPostRecord]:
        return await asyncio.to_thread(self._find_all_sync)

    def _find_all_sync(self) -> List[BlogPostRecord]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM blog_posts ORDER BY created_at ASC, id ASC").fetchall()
        return [self._row_to_record(row) for row in rows]

    async def count(self) -> int:
        return await asyncio.to_thread(self._count_sync)

    def _count_sync(self) -> int:
        with self._transaction() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM blog_posts").fetchone()
        return row["total"]

    async def update(self, post_id: str, changes: Mapping[str, Any]) -> Optional[BlogPostRecord]:
        cleaned = validate_changes(changes)
        return await asyncio.to_thread(self._update_sync, post_id, cleaned)

    def _update_sync(self, post_id: str, changes: Dict[str, str]) -> Optional[BlogPostRecord]:
        with self._transaction() as conn:
            if self._select_one(conn, post_id) is None:
                logger.debug("Blog post %s not found for update", post_id)
                return None
            if changes:
                assignments = ", ".join(f"{field} = ?" for field in changes)
                conn.execute(
                    f"UPDATE blog_posts SET {assignments} WHERE id = ?",
                    (*changes.values(), post_id),
                )
            row = self._select_one(conn, post_id)
        logger.info("Updated blog post %s (%s)", post_id, ", ".join(sorted(changes)) or "no changes")
        return self._row_to_record(row)

    async def delete_by_id(self, post_id: str) -> bool:
        return await asyncio.to_thread(self._delete_by_id_sync, post_id)

    def _delete_by_id_sync(self, post_id: str) -> bool:
        with self._transaction() as conn:
            affected = conn.execute("DELETE FROM blog_posts WHERE id = ?", (post_id,)).rowcount
        if affected:
            logger.info("Deleted blog post %s", post_id)
        else:
            logger.debug("Blog post %s already absent", post_id)
        return affected > 0

    async def clear(self) -> int:
        return await asyncio.to_thread(self._clear_sync)

    def _clear_sync(self) -> int:
        with self._transaction() as conn:
            affected = conn.execute("DELETE FROM blog_posts").rowcount
        logger.warning("Cleared %d blog posts from %s", affected, self.database_url)
        return affected


class InMemoryBlogPostStore(BlogPostStore):
    """Post store kept in process memory.

    Every operation completes without yielding to the event loop, so
    each one is atomic with respect to other requests.  Records are
    copied on the way in and out so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._posts: Dict[str, BlogPostRecord] = {}

    def __repr__(self) -> str:
        return f"InMemoryBlogPostStore({len(self._posts)} posts)"

    def _build(self, fields: Dict[str, str]) -> BlogPostRecord:
        return BlogPostRecord(id=_new_id(), created_at=_now(), **fields)

    async def create(self, record: Mapping[str, Any]) -> BlogPostRecord:
        post = self._build(validate_new_record(record))
        self._posts[post.id] = post
        logger.info("Created blog post %s", post.id)
        return post.model_copy()

    async def create_many(self, records: Iterable[Mapping[str, Any]]) -> List[BlogPostRecord]:
        posts = [self._build(validate_new_record(record)) for record in records]
        for post in posts:
            self._posts[post.id] = post
        logger.info("Created %d blog posts", len(posts))
        return [post.model_copy() for post in posts]

    async def find_by_id(self, post_id: str) -> Optional[BlogPostRecord]:
        post = self._posts.get(post_id)
        return post.model_copy() if post is not None else None

    async def find_all(self) -> List[BlogPostRecord]:
        return [post.model_copy() for post in self._posts.values()]

    async def count(self) -> int:
        return len(self._posts)

    async def update(self, post_id: str, changes: Mapping[str, Any]) -> Optional[BlogPostRecord]:
        cleaned = validate_changes(changes)
        post = self._posts.get(post_id)
        if post is None:
            return None
        updated = post.model_copy(update=cleaned)
        self._posts[post_id] = updated
        logger.info("Updated blog post %s (%s)", post_id, ", ".join(sorted(cleaned)) or "no changes")
        return updated.model_copy()

    async def delete_by_id(self, post_id: str) -> bool:
        removed = self._posts.pop(post_id, None) is not None
        if removed:
            logger.info("Deleted blog post %s", post_id)
        return removed

    async def clear(self) -> int:
        removed = len(self._posts)
        self._posts.clear()
        logger.warning("Cleared %d blog posts from memory", removed)
        return removed
