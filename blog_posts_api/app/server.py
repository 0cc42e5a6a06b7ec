"""
Start and stop the HTTP service from inside a running event loop.

Integration tooling brings the service up against a given store with
``run_server`` and takes it down again with ``close_server``.  Only
one server runs at a time per process.
"""

import asyncio
import logging
from typing import Optional

from uvicorn import Config, Server

from .core.config import settings
from .main import create_app
from .services.blog_post_service import BlogPostStore

logger = logging.getLogger(__name__)

_server: Optional[Server] = None
_serve_task: Optional["asyncio.Task[None]"] = None


def bound_port(server: Server) -> Optional[int]:
    """Return the port the server is actually listening on."""
    for listener in getattr(server, "servers", []) or []:
        for sock in listener.sockets:
            return sock.getsockname()[1]
    return None


async def _serve(server: Server) -> None:
    """Run ``server`` until it exits.

    Uvicorn calls ``sys.exit`` when it cannot start (for example when
    the port is taken).  Raise ``RuntimeError`` instead so the failure
    stays inside the serving task rather than ending the event loop.
    """
    try:
        await server.serve()
    except SystemExit as exc:
        raise RuntimeError(f"Server exited with status {exc.code} during startup") from exc


async def run_server(
    database_url: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    store: Optional[BlogPostStore] = None,
) -> Server:
    """Start serving and return once the server accepts connections.

    ``port=0`` binds an ephemeral port; use ``bound_port`` to find it.
    Raises ``RuntimeError`` if a server is already running or if it
    stops before it finished starting.
    """
    global _server, _serve_task
    if _server is not None:
        raise RuntimeError("Server is already running")

    app = create_app(store=store, database_url=database_url or settings.database_url)
    config = Config(
        app=app,
        host=host or settings.host,
        port=settings.port if port is None else port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
    server = Server(config)
    task = asyncio.create_task(_serve(server))

    while not server.started:
        if task.done():
            # Surface the startup failure instead of spinning forever.
            task.result()
            raise RuntimeError("Server stopped during startup")
        await asyncio.sleep(0.01)

    _server, _serve_task = server, task
    logger.info("Server listening on %s:%s", config.host, bound_port(server))
    return server


async def close_server() -> None:
    """Stop the running server.  Does nothing if none is running."""
    global _server, _serve_task
    if _server is None:
        return
    server, task = _server, _serve_task
    _server, _serve_task = None, None
    logger.info("Closing server")
    server.should_exit = True
    await task
