"""API v1 routers."""

from fastapi import APIRouter

from .search import router as search_router

# Create v1 router that includes all v1 endpoints
router = APIRouter(prefix="/v1")

router.include_router(search_router)

__all__ = ["router", "search_router"]
