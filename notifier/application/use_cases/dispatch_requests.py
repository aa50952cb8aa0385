"""Use cases for inspecting and re-arming dispatch requests."""

from sqlalchemy.orm import Session

from notifier.container import DispatchService
from notifier.domain.entities import DISPATCH_STATES, DispatchRequest
from notifier.infrastructure.repositories import DispatchRequestRepository


def list_dispatch_requests(
    session: Session, *, state: str | None = None, limit: int = 100
) -> list[DispatchRequest]:
    """Return dispatch requests, newest first, optionally filtered by state."""

    if state is not None and state not in DISPATCH_STATES:
        raise ValueError(f"Unknown dispatch state '{state}'")
    return list(DispatchRequestRepository(session).list(state=state, limit=limit))


def get_dispatch_request(session: Session, request_id: int) -> DispatchRequest:
    request = DispatchRequestRepository(session).get(request_id)
    if request is None:
        raise ValueError("Dispatch request not found")
    return request


def retry_dispatch_request(service: DispatchService, request_id: int) -> DispatchRequest:
    """Give a failed request a fresh attempt budget and queue it again."""

    request = service.coordinator.retry_failed(request_id)
    service.workers.submit(request.id)
    return request


__all__ = [
    "get_dispatch_request",
    "list_dispatch_requests",
    "retry_dispatch_request",
]
