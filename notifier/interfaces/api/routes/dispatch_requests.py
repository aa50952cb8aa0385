"""Routes for inspecting and retrying dispatch requests."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from notifier.application.use_cases.dispatch_requests import (
    get_dispatch_request as get_dispatch_request_uc,
    list_dispatch_requests as list_dispatch_requests_uc,
    retry_dispatch_request as retry_dispatch_request_uc,
)
from notifier.container import DispatchService
from notifier.infrastructure.database import get_db
from notifier.interfaces.api.dependencies import get_dispatch_service
from notifier.interfaces.api.schemas import DispatchRequestRead

router = APIRouter(prefix="/dispatch/requests", tags=["dispatch"])


@router.get("/", response_model=list[DispatchRequestRead])
def list_dispatch_requests(
    state: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[DispatchRequestRead]:
    """Return dispatch requests optionally filtered by state."""

    try:
        requests = list_dispatch_requests_uc(db, state=state, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return [DispatchRequestRead.model_validate(request) for request in requests]


@router.get("/{request_id}", response_model=DispatchRequestRead)
def read_dispatch_request(
    request_id: int,
    db: Session = Depends(get_db),
) -> DispatchRequestRead:
    try:
        request = get_dispatch_request_uc(db, request_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return DispatchRequestRead.model_validate(request)


@router.post(
    "/{request_id}/retry",
    response_model=DispatchRequestRead,
    status_code=status.HTTP_202_ACCEPTED,
)
def retry_dispatch_request(
    request_id: int,
    db: Session = Depends(get_db),
    service: DispatchService = Depends(get_dispatch_service),
) -> DispatchRequestRead:
    """Re-arm a failed dispatch request and queue it."""

    try:
        get_dispatch_request_uc(db, request_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    try:
        request = retry_dispatch_request_uc(service, request_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return DispatchRequestRead.model_validate(request)


__all__ = ["router"]
