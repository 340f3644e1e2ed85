"""API v1 router aggregation."""
from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.api.v1.comments import router as comments_router
from app.api.v1.likes import router as likes_router
from app.api.v1.posts import router as posts_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(comments_router)
router.include_router(likes_router)
router.include_router(posts_router)
