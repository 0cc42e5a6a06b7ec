"""
Blog post endpoints for API v1.

These routes expose list, fetch, create, update and delete for blog
posts.  Request bodies are validated before the store is touched, so
a rejected request never mutates anything.  Stored posts are mapped
to the wire shape ``{id, title, content, author}`` on the way out.

Delete is idempotent: removing a post that does not exist still
answers 204.  Fetch and update require the post to exist and answer
404 otherwise.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from blog_posts_api.app.api.deps import get_store
from blog_posts_api.app.core.exceptions import ConflictError, NotFoundError
from blog_posts_api.app.schemas.blog_post import BlogPostCreate, BlogPostRead, BlogPostUpdate
from blog_posts_api.app.services.blog_post_service import BlogPostStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[BlogPostRead])
async def list_posts(store: BlogPostStore = Depends(get_store)) -> List[BlogPostRead]:
    """Return every post.  An empty collection is still a 200."""
    posts = await store.find_all()
    return [BlogPostRead.from_record(post) for post in posts]


@router.get("/{post_id}", response_model=BlogPostRead)
async def get_post(post_id: str, store: BlogPostStore = Depends(get_store)) -> BlogPostRead:
    """Retrieve a single post by id."""
    post = await store.find_by_id(post_id)
    if post is None:
        raise NotFoundError(post_id)
    return BlogPostRead.from_record(post)


@router.post("", response_model=BlogPostRead, status_code=status.HTTP_201_CREATED)
async def create_post(post_in: BlogPostCreate, store: BlogPostStore = Depends(get_store)) -> BlogPostRead:
    """Create a post, deriving the author's display name from first and last name."""
    post = await store.create(post_in.to_record_fields())
    return BlogPostRead.from_record(post)


@router.put("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_post(
    post_id: str,
    post_in: BlogPostUpdate,
    store: BlogPostStore = Depends(get_store),
) -> Response:
    """Update the supplied fields of an existing post."""
    if post_in.id is not None and post_in.id != post_id:
        raise ConflictError(post_id, post_in.id)
    post = await store.update(post_id, post_in.to_changes())
    if post is None:
        raise NotFoundError(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: str, store: BlogPostStore = Depends(get_store)) -> Response:
    """Delete a post.  Deleting an unknown id is not an error."""
    await store.delete_by_id(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
