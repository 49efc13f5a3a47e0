"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, books, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(books.router, prefix="/books", tags=["books"])
