"""HTTP routes: form actions under /api, JSON read endpoints at the site paths."""

from fastapi import APIRouter

from inkwell.api import admin, auth, health, pages, posts

router = APIRouter()
router.include_router(health.router, prefix="/api/health", tags=["health"])
router.include_router(auth.router, prefix="/api/auth", tags=["auth"])
router.include_router(posts.posts_router, prefix="/api/posts", tags=["posts"])
router.include_router(posts.comments_router, prefix="/api/comments", tags=["comments"])
router.include_router(admin.router, prefix="/api/admin", tags=["admin"])
router.include_router(pages.router, tags=["pages"])
