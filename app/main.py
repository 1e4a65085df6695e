"""HireTrack - hiring application lifecycle service."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import ApplicationError, application_error_handler
from app.core.storage import init_models
from app.routers import (
    analytics_router,
    applications_router,
    documents_router,
    interviews_router,
    notes_router,
)
from app.services.notifications import get_publisher
from app.services.reminder_service import reminder_service

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    await init_models()

    if settings.reminder_enabled:
        logger.info("Starting interview reminders...")
        await reminder_service.start()

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await reminder_service.stop()
    logger.info("Shutdown complete")


app = FastAPI(
    title="HireTrack",
    description="Hiring application lifecycle: stages, interviews, notes and analytics",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ApplicationError, application_error_handler)

app.include_router(applications_router)
app.include_router(interviews_router)
app.include_router(notes_router)
app.include_router(documents_router)
app.include_router(analytics_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "hiretrack",
        "reminders": reminder_service.get_status(),
        "notifications": await get_publisher().get_status(),
    }


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
