"""Router package exposing all API routers."""

from fastapi import APIRouter

from .roast.router import router as roast_router

router = APIRouter()
router.include_router(roast_router)

__all__ = ["router", "roast_router"]
