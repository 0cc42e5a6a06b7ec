"""Request dependencies shared by the API routers."""

from fastapi import Request

from blog_posts_api.app.services.blog_post_service import BlogPostStore


def get_store(request: Request) -> BlogPostStore:
    """Return the post store attached to the running application."""
    return request.app.state.store
