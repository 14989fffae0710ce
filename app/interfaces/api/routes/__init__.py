from fastapi import FastAPI

from .announcements import router as announcements_router
from .auth import router as auth_router
from .batches import router as batches_router
from .notices import router as notices_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(auth_router)
    app.include_router(announcements_router)
    app.include_router(batches_router)
    app.include_router(notices_router)
    app.include_router(notifications_router)
