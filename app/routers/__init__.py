"""API routers."""

from app.routers.analytics import router as analytics_router
from app.routers.applications import router as applications_router
from app.routers.documents import router as documents_router
from app.routers.interviews import router as interviews_router
from app.routers.notes import router as notes_router

__all__ = [
    "analytics_router",
    "applications_router",
    "documents_router",
    "interviews_router",
    "notes_router",
]
