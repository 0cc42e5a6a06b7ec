"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any environment at all; in a deployment you
should override them via environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Blog Posts API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Connection string for the post store.  This is a SQLite database
    # path; relative paths are resolved against the working directory by the
    # ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "blog_posts.db")

    # Separate database used by integration tooling so that seeding and
    # teardown never touch the real data.
    test_database_url: str = os.getenv("TEST_DATABASE_URL", "test_blog_posts.db")

    # Prefix under which the posts resource is mounted.  Empty means the
    # resource lives at ``/posts``.
    api_prefix: str = os.getenv("API_PREFIX", "")

    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8080"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
