"""
Main entrypoint for the Blog Posts API.

This module assembles the FastAPI application, sets up logging,
registers error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn blog_posts_api.app.main:app --reload

The post store is attached to ``app.state.store``.  Pass a store to
``create_app`` to serve a different one, for example an in-memory
store in tests or a SQLite store pointed at a test database.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.error_handlers import register_error_handlers
from .core.logging_config import setup_logging
from .services.blog_post_service import BlogPostStore, SQLiteBlogPostStore

logger = logging.getLogger(__name__)


def create_app(
    store: Optional[BlogPostStore] = None,
    database_url: Optional[str] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[BlogPostStore]
        Store to serve.  When omitted a ``SQLiteBlogPostStore`` is
        built from ``database_url``.
    database_url : Optional[str]
        Connection string for the default store.  Defaults to
        ``settings.database_url``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that startup can log.
    setup_logging(settings.log_level, settings.log_file)

    if store is None:
        store = SQLiteBlogPostStore(database_url or settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.store.init()
        logger.info("Serving blog posts from %r", app.state.store)
        yield

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.store = store

    register_error_handlers(app)
    app.include_router(v1_router, prefix=settings.api_prefix)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
