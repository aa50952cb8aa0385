"""Routes for reading the delivery attempt audit trail."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from notifier.application.use_cases.delivery_attempts import (
    get_delivery_attempt as get_delivery_attempt_uc,
    list_delivery_attempts as list_delivery_attempts_uc,
    summarize_delivery_attempts as summarize_delivery_attempts_uc,
)
from notifier.infrastructure.database import get_db
from notifier.interfaces.api.schemas import DeliveryAttemptRead, DeliveryAttemptSummary

router = APIRouter(prefix="/delivery-attempts", tags=["delivery_attempts"])


@router.get("/", response_model=list[DeliveryAttemptRead])
def list_delivery_attempts(
    type: str | None = Query(default=None, description="Notification type"),
    channel: str | None = None,
    success: bool | None = None,
    dispatch_request_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[DeliveryAttemptRead]:
    """Return delivery attempts, newest first, matching the filters."""

    try:
        attempts = list_delivery_attempts_uc(
            db,
            notification_type=type,
            channel=channel,
            success=success,
            dispatch_request_id=dispatch_request_id,
            created_from=date_from,
            created_to=date_to,
            limit=limit,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return [DeliveryAttemptRead.model_validate(attempt) for attempt in attempts]


@router.get("/summary", response_model=DeliveryAttemptSummary)
def summarize_delivery_attempts(
    type: str | None = Query(default=None, description="Notification type"),
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    db: Session = Depends(get_db),
) -> DeliveryAttemptSummary:
    counts = summarize_delivery_attempts_uc(
        db, notification_type=type, created_from=date_from, created_to=date_to
    )
    return DeliveryAttemptSummary.from_counts(counts)


@router.get("/{attempt_id}", response_model=DeliveryAttemptRead)
def read_delivery_attempt(
    attempt_id: int,
    db: Session = Depends(get_db),
) -> DeliveryAttemptRead:
    """Return the delivery attempt identified by ``attempt_id``."""

    try:
        attempt = get_delivery_attempt_uc(db, attempt_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return DeliveryAttemptRead.model_validate(attempt)


__all__ = ["router"]
