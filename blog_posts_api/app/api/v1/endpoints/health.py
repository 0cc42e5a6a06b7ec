"""Health check endpoint reporting service and store status."""

from typing import Dict

from fastapi import APIRouter, Depends

from blog_posts_api.app.api.deps import get_store
from blog_posts_api.app.services.blog_post_service import BlogPostStore

router = APIRouter()


@router.get("/health")
async def health(store: BlogPostStore = Depends(get_store)) -> Dict[str, str]:
    db_connected = await store.ping()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog-posts",
        "database": "connected" if db_connected else "disconnected",
    }
