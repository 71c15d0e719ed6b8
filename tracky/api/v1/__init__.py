"""API v1 routes."""

from fastapi import APIRouter

from tracky.api.v1 import analysis, auth, health, images, notebooks, notes

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(notebooks.router, prefix="/notebooks", tags=["notebooks"])
router.include_router(notes.router, prefix="/notes", tags=["notes"])
router.include_router(images.router, prefix="/images", tags=["images"])
router.include_router(analysis.router, prefix="/analysis", tags=["analysis"])

# Served outside API_V1_PREFIX
files_router = images.files_router
