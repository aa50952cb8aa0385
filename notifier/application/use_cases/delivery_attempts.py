"""Use cases for reading the delivery attempt audit trail."""

from datetime import datetime

from sqlalchemy.orm import Session

from notifier.domain.entities import DeliveryAttempt
from notifier.infrastructure.repositories import DeliveryAttemptRepository


def list_delivery_attempts(
    session: Session,
    *,
    notification_type: str | None = None,
    channel: str | None = None,
    success: bool | None = None,
    dispatch_request_id: int | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    limit: int = 100,
) -> list[DeliveryAttempt]:
    """Return delivery attempts, newest first, matching the provided filters."""

    if created_from and created_to and created_from > created_to:
        raise ValueError("date_from must not be later than date_to")

    repository = DeliveryAttemptRepository(session)
    return repository.list(
        notification_type=notification_type,
        channel=channel,
        success=success,
        dispatch_request_id=dispatch_request_id,
        created_from=created_from,
        created_to=created_to,
        limit=limit,
    )


def get_delivery_attempt(session: Session, attempt_id: int) -> DeliveryAttempt:
    """Return the delivery attempt identified by ``attempt_id`` or raise an error."""

    attempt = DeliveryAttemptRepository(session).get(attempt_id)
    if attempt is None:
        raise ValueError("Delivery attempt not found")
    return attempt


def summarize_delivery_attempts(
    session: Session,
    *,
    notification_type: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> dict[str, dict[str, int]]:
    return DeliveryAttemptRepository(session).summarize(
        notification_type=notification_type,
        created_from=created_from,
        created_to=created_to,
    )


__all__ = [
    "get_delivery_attempt",
    "list_delivery_attempts",
    "summarize_delivery_attempts",
]
