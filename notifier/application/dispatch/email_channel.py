"""Deliver document notifications by email in fixed-size batches."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, Sequence

from sqlalchemy.orm import Session

from notifier.domain.entities import (
    CHANNEL_EMAIL,
    OUTCOME_FAILED,
    OUTCOME_SENT,
    OUTCOME_SKIPPED,
    BatchResult,
    DeliveryAttempt,
    DeliveryOutcome,
    Recipient,
    SubscriberRecipient,
)
from notifier.domain.exceptions import describe_exception
from notifier.infrastructure.email import MailMessage, MailTransport
from notifier.infrastructure.repositories import RecipientRepository
from notifier.utils import utc_now

from .audit import DeliveryAuditLog
from .timeouts import BoundedCaller
from .validators import EmailAddressPolicy

logger = logging.getLogger(__name__)


def chunked(items: Sequence[Recipient], size: int) -> Iterator[Sequence[Recipient]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class EmailChannel:
    """Send one email per recipient; a failing address never stops the batch."""

    def __init__(
        self,
        transport: MailTransport,
        audit_log: DeliveryAuditLog,
        caller: BoundedCaller,
        session_factory: Callable[[], Session],
        *,
        policy: EmailAddressPolicy,
        batch_size: int = 10,
        timeout_seconds: float = 10.0,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._transport = transport
        self._audit_log = audit_log
        self._caller = caller
        self._session_factory = session_factory
        self._policy = policy
        self._batch_size = max(1, batch_size)
        self._timeout_seconds = timeout_seconds
        self._stop_event = stop_event or threading.Event()

    def send_batch(
        self,
        recipients: Sequence[Recipient],
        message: MailMessage,
        *,
        notification_type: str,
        dispatch_request_id: int | None = None,
    ) -> BatchResult:
        """Deliver ``message`` to every recipient, ``batch_size`` at a time."""

        result = BatchResult()
        batches = list(chunked(recipients, self._batch_size))
        for number, batch in enumerate(batches, start=1):
            if self._stop_event.is_set():
                result.interrupted = True
                logger.warning(
                    "Stopping email delivery before batch %d of %d", number, len(batches)
                )
                break

            for recipient in batch:
                result.add(
                    self._send_isolated(
                        recipient, message, notification_type, dispatch_request_id
                    )
                )

            logger.debug("Email batch %d of %d processed", number, len(batches))

        logger.info(
            "Email delivery finished: %d sent, %d failed, %d skipped%s",
            result.sent,
            result.failed,
            result.skipped,
            " (interrupted)" if result.interrupted else "",
        )
        return result

    def send(
        self,
        recipient: Recipient,
        message: MailMessage,
        *,
        notification_type: str,
        dispatch_request_id: int | None = None,
    ) -> DeliveryOutcome:
        """Deliver ``message`` to a single recipient."""

        reason = self._policy.rejection_reason(recipient.email)
        if reason is not None:
            logger.warning(
                "Skipping email to %s %s: %s", recipient.kind, recipient.id, reason
            )
            return DeliveryOutcome(
                channel=CHANNEL_EMAIL,
                status=OUTCOME_SKIPPED,
                recipient_id=recipient.id,
                reason=reason,
            )

        address = recipient.email.strip()
        try:
            message_id = self._caller.call(
                self._transport.send_mail,
                address,
                message,
                timeout=self._timeout_seconds,
            )
        except Exception as exc:
            error = describe_exception(exc)
            logger.error(
                "Failed to send email to %s %s: %s", recipient.kind, recipient.id, error
            )
            self._record(
                recipient,
                message,
                address=address,
                notification_type=notification_type,
                dispatch_request_id=dispatch_request_id,
                error=error,
            )
            return DeliveryOutcome(
                channel=CHANNEL_EMAIL,
                status=OUTCOME_FAILED,
                recipient_id=recipient.id,
                error=error,
            )

        self._record(
            recipient,
            message,
            address=address,
            notification_type=notification_type,
            dispatch_request_id=dispatch_request_id,
            message_id=message_id,
        )
        if isinstance(recipient, SubscriberRecipient) and recipient.id is not None:
            self._mark_notified(recipient)
        return DeliveryOutcome(
            channel=CHANNEL_EMAIL,
            status=OUTCOME_SENT,
            recipient_id=recipient.id,
            message_id=message_id,
        )

    def _send_isolated(
        self,
        recipient: Recipient,
        message: MailMessage,
        notification_type: str,
        dispatch_request_id: int | None,
    ) -> DeliveryOutcome:
        try:
            return self.send(
                recipient,
                message,
                notification_type=notification_type,
                dispatch_request_id=dispatch_request_id,
            )
        except Exception as exc:
            logger.exception(
                "Unexpected error sending email to %s %s", recipient.kind, recipient.id
            )
            return DeliveryOutcome(
                channel=CHANNEL_EMAIL,
                status=OUTCOME_FAILED,
                recipient_id=recipient.id,
                error=describe_exception(exc),
            )

    def _mark_notified(self, subscriber: SubscriberRecipient) -> None:
        notified_at = utc_now()
        try:
            session = self._session_factory()
            try:
                RecipientRepository(session).touch_last_notified(subscriber.id, notified_at)
            finally:
                session.close()
        except Exception:
            logger.exception(
                "Could not update last notification time for subscriber %s", subscriber.id
            )
            return
        subscriber.last_notified_at = notified_at

    def _record(
        self,
        recipient: Recipient,
        message: MailMessage,
        *,
        address: str,
        notification_type: str,
        dispatch_request_id: int | None,
        message_id: str | None = None,
        error: str | None = None,
    ) -> None:
        self._audit_log.record(
            DeliveryAttempt(
                id=None,
                channel=CHANNEL_EMAIL,
                notification_type=notification_type,
                title=message.subject,
                body=message.summary,
                success=error is None,
                recipient_kind=recipient.kind,
                recipient_id=recipient.id,
                address=address,
                message_id=message_id,
                error=error,
                dispatch_request_id=dispatch_request_id,
            )
        )


__all__ = ["EmailChannel", "chunked"]
