from fastapi import FastAPI

from .maintenance import router as maintenance_router
from .notifications import router as notifications_router
from .push import router as push_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(notifications_router)
    app.include_router(push_router)
    app.include_router(maintenance_router)
