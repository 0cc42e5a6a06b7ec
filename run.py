"""Entry point for the Blog Posts API.

Serves the API with Uvicorn until interrupted.  Host, port and the
database are read from the environment (``HOST``, ``PORT``,
``DATABASE_URL``); see ``blog_posts_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging

from blog_posts_api.app.server import close_server, run_server


async def main() -> None:
    """Run the API until the process is interrupted."""
    server = await run_server()
    try:
        # Uvicorn installs its own signal handlers; wait for it to exit.
        while not server.should_exit:
            await asyncio.sleep(0.5)
    finally:
        await close_server()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Shutting down")
