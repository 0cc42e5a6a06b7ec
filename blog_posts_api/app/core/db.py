"""
SQLite database integration and simple migration system.

This module provides functions for opening a connection to the post
store (``connect``), applying migrations (``init_db``) and checking
connectivity (``check_connection``).  Every function takes the
connection string explicitly so that several stores (for example an
application store and a test store) can live side by side.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3

logger = logging.getLogger(__name__)

# Each entry is (version, statements).  Append new migrations with an
# incremented version number; never edit an applied one.  Statements
# run one by one inside the initialising transaction.
MIGRATIONS: list[tuple[int, list[str]]] = [
    (
        1,
        [
            """
            CREATE TABLE IF NOT EXISTS blog_posts (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                author_name TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
        ],
    ),
]


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Accepts a plain path or a ``sqlite:///`` URL.  Absolute paths are
    used directly; relative ones are resolved against the current
    working directory.
    """
    if database_url.startswith("sqlite:///"):
        database_url = database_url[len("sqlite:///"):]
    return os.path.abspath(database_url)


def connect(database_url: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.
    """
    conn = sqlite3.connect(get_database_path(database_url))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(database_url: str) -> None:
    """Initialise the database and apply pending migrations.

    The version check and the migrations run under one write lock
    (``BEGIN IMMEDIATE``), so concurrent initialisers, in this process
    or another, apply each migration exactly once.
    """
    conn = connect(database_url)
    conn.isolation_level = None
    applied: list[int] = []
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current = row["version"] or 0
            for version, statements in MIGRATIONS:
                if version <= current:
                    continue
                for statement in statements:
                    conn.execute(statement)
                conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                applied.append(version)
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
    finally:
        conn.close()
    for version in applied:
        logger.info("Applied migration %s to %s", version, database_url)


def check_connection(database_url: str) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        conn = connect(database_url)
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
        return True
    except sqlite3.Error:
        logger.warning("Database %s is not reachable", database_url, exc_info=True)
        return False
