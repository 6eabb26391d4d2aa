"""API v1 router initialization."""
from fastapi import APIRouter

from .media import router as media_router
from .people import router as people_router

# Create v1 router
router = APIRouter()

router.include_router(people_router, prefix="/people", tags=["people"])
router.include_router(media_router, prefix="/media", tags=["media"])
