"""
Application package initializer.

The service exposes a single resource, blog posts, over HTTP.  It is
split into a persistence side (``services``), request/response
schemas (``schemas``) and versioned routers (``api/v1/endpoints``).
Shared infrastructure such as configuration, logging, the database
connection and the error taxonomy lives in ``core``.
"""

from .main import app, create_app  # noqa: F401
