"""Deliver push notifications to account device tokens."""

from __future__ import annotations

import hashlib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Sequence

from notifier.domain.entities import (
    CHANNEL_PUSH,
    OUTCOME_FAILED,
    OUTCOME_RATE_LIMITED,
    OUTCOME_SENT,
    OUTCOME_SKIPPED,
    SKIP_NO_PUSH_TOKEN,
    SKIP_RATE_LIMITED,
    AccountRecipient,
    BatchResult,
    DeliveryAttempt,
    DeliveryOutcome,
    Recipient,
)
from notifier.domain.exceptions import describe_exception
from notifier.infrastructure.push import PushMessage, PushTransport
from notifier.infrastructure.rate_limiter import RateLimiter
from notifier.utils import utc_now

from .audit import DeliveryAuditLog
from .timeouts import BoundedCaller

logger = logging.getLogger(__name__)


def rate_limit_key(recipient: Recipient) -> str:
    """Return the cooldown key for ``recipient``."""

    if recipient.id is not None:
        return f"push:{recipient.id}"
    token = getattr(recipient, "push_token", None) or ""
    return f"push:{hashlib.sha256(token.encode()).hexdigest()}"


class PushChannel:
    """Send one push per recipient, throttled and audited."""

    def __init__(
        self,
        transport: PushTransport,
        rate_limiter: RateLimiter,
        audit_log: DeliveryAuditLog,
        caller: BoundedCaller,
        *,
        cooldown_seconds: float = 15,
        timeout_seconds: float = 10.0,
        concurrency: int = 8,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._transport = transport
        self._rate_limiter = rate_limiter
        self._audit_log = audit_log
        self._caller = caller
        self._cooldown_seconds = cooldown_seconds
        self._timeout_seconds = timeout_seconds
        self._concurrency = max(1, concurrency)
        self._stop_event = stop_event or threading.Event()

    def send(
        self,
        recipient: Recipient,
        message: PushMessage,
        *,
        dispatch_request_id: int | None = None,
    ) -> DeliveryOutcome:
        """Deliver ``message`` to the device token held by ``recipient``."""

        if not recipient.has_push_token():
            return DeliveryOutcome(
                channel=CHANNEL_PUSH,
                status=OUTCOME_SKIPPED,
                recipient_id=recipient.id,
                reason=SKIP_NO_PUSH_TOKEN,
            )

        key = rate_limit_key(recipient)
        if not self._rate_limiter.try_acquire(key, self._cooldown_seconds):
            logger.warning(
                "Rate limit active for %s %s; skipping push",
                recipient.kind,
                recipient.id,
            )
            return DeliveryOutcome(
                channel=CHANNEL_PUSH,
                status=OUTCOME_RATE_LIMITED,
                recipient_id=recipient.id,
                reason=SKIP_RATE_LIMITED,
            )

        token = recipient.push_token
        outgoing = replace(
            message,
            data={**message.data, "sent_at": utc_now().isoformat()},
        )
        notification_type = outgoing.data.get("notification_type", "general")

        try:
            message_id = self._caller.call(
                self._transport.send_push,
                token,
                outgoing,
                timeout=self._timeout_seconds,
            )
        except Exception as exc:
            error = describe_exception(exc)
            logger.error("Push to %s %s failed: %s", recipient.kind, recipient.id, error)
            self._record(
                recipient,
                outgoing,
                notification_type=notification_type,
                dispatch_request_id=dispatch_request_id,
                error=error,
            )
            return DeliveryOutcome(
                channel=CHANNEL_PUSH,
                status=OUTCOME_FAILED,
                recipient_id=recipient.id,
                error=error,
            )

        self._record(
            recipient,
            outgoing,
            notification_type=notification_type,
            dispatch_request_id=dispatch_request_id,
            message_id=message_id,
        )
        return DeliveryOutcome(
            channel=CHANNEL_PUSH,
            status=OUTCOME_SENT,
            recipient_id=recipient.id,
            message_id=message_id,
        )

    def send_many(
        self,
        recipients: Sequence[AccountRecipient],
        message: PushMessage,
        *,
        dispatch_request_id: int | None = None,
    ) -> BatchResult:
        """Fan ``message`` out to ``recipients`` with bounded concurrency."""

        result = BatchResult()
        if not recipients:
            return result

        workers = min(self._concurrency, len(recipients))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notifier-push") as pool:
            futures = []
            for recipient in recipients:
                if self._stop_event.is_set():
                    result.interrupted = True
                    break
                futures.append(
                    pool.submit(
                        self._send_isolated,
                        recipient,
                        message,
                        dispatch_request_id,
                    )
                )
            for future in futures:
                result.add(future.result())

        logger.info(
            "Push delivery finished: %d sent, %d failed, %d skipped%s",
            result.sent,
            result.failed,
            result.skipped,
            " (interrupted)" if result.interrupted else "",
        )
        return result

    def _send_isolated(
        self,
        recipient: AccountRecipient,
        message: PushMessage,
        dispatch_request_id: int | None,
    ) -> DeliveryOutcome:
        try:
            return self.send(recipient, message, dispatch_request_id=dispatch_request_id)
        except Exception as exc:
            logger.exception("Unexpected error sending push to account %s", recipient.id)
            return DeliveryOutcome(
                channel=CHANNEL_PUSH,
                status=OUTCOME_FAILED,
                recipient_id=recipient.id,
                error=describe_exception(exc),
            )

    def _record(
        self,
        recipient: Recipient,
        message: PushMessage,
        *,
        notification_type: str,
        dispatch_request_id: int | None,
        message_id: str | None = None,
        error: str | None = None,
    ) -> None:
        self._audit_log.record(
            DeliveryAttempt(
                id=None,
                channel=CHANNEL_PUSH,
                notification_type=notification_type,
                title=message.title,
                body=message.body,
                success=error is None,
                recipient_kind=recipient.kind,
                recipient_id=recipient.id,
                token=getattr(recipient, "push_token", None),
                message_id=message_id,
                error=error,
                dispatch_request_id=dispatch_request_id,
                metadata={"link": message.link, **message.data},
            )
        )


__all__ = ["PushChannel", "rate_limit_key"]
