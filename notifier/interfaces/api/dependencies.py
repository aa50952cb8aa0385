"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, status

from notifier.application.dispatch import TransitionGuard
from notifier.container import DispatchService


def get_dispatch_service(request: Request) -> DispatchService:
    """Return the dispatch engine started by the application lifespan."""

    service = getattr(request.app.state, "dispatch_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dispatch service is not running",
        )
    return service


def get_transition_guard(request: Request) -> TransitionGuard:
    return get_dispatch_service(request).guard


__all__ = ["get_dispatch_service", "get_transition_guard"]
