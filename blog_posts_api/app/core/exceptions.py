"""
Error taxonomy for the blog posts service.

These exceptions are raised by the store and the request handlers and
are translated into HTTP responses by the handlers registered in
``core.error_handlers``.  None of them carry HTTP details themselves so
the store stays usable outside of a web context.
"""

from typing import Any, Dict, Optional


class BlogPostError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BlogPostError):
    """A required field is missing or malformed.

    ``errors`` maps a dotted field path (e.g. ``author.lastName``) to a
    human readable reason.
    """

    def __init__(self, message: str = "Validation failed", errors: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class NotFoundError(BlogPostError):
    """The addressed post does not exist."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"Blog post {post_id} not found")
        self.post_id = post_id


class ConflictError(BlogPostError):
    """The id in an update body does not match the id in the path."""

    def __init__(self, path_id: str, body_id: str) -> None:
        super().__init__(
            f"Request path id ({path_id}) and request body id ({body_id}) must match"
        )
        self.path_id = path_id
        self.body_id = body_id


class StoreError(BlogPostError):
    """The underlying store failed to complete an operation."""
