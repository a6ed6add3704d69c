"""API v1 routes."""

from fastapi import APIRouter

from usermanagement.api.v1 import auth, health, pages, register, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(register.router, prefix="/register", tags=["registration"])
router.include_router(auth.router, tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(pages.router, tags=["pages"])
