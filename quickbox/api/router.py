"""Main API router."""

from fastapi import APIRouter

from quickbox import __version__

from .documents import router as documents_router
from .sessions import router as sessions_router

api_router = APIRouter()


@api_router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


# Mount sub-routers
# Note: documents_router defines full paths /sessions/{id}/...
api_router.include_router(sessions_router)
api_router.include_router(documents_router)
