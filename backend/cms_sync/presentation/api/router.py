"""Top-level API router — health, admin and public content routes."""

from fastapi import APIRouter

from cms_sync.presentation.api.endpoints.content import admin_router, public_router
from cms_sync.presentation.api.endpoints.health import router as health_router

router = APIRouter(prefix="/api")
# Fixed paths before the catch-all /{resource}.
router.include_router(health_router)
router.include_router(admin_router)
router.include_router(public_router)
