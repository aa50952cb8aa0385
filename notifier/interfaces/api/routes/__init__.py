from fastapi import FastAPI

from .broadcasts import router as broadcasts_router
from .delivery_attempts import router as delivery_attempts_router
from .devices import router as devices_router
from .dispatch_requests import router as dispatch_requests_router
from .events import router as events_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(events_router)
    app.include_router(broadcasts_router)
    app.include_router(dispatch_requests_router)
    app.include_router(delivery_attempts_router)
    app.include_router(devices_router)
