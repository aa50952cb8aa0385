"""Drive a dispatch request from resolution to delivery on both channels."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable

from sqlalchemy.orm import Session

from notifier.config import Settings
from notifier.domain.entities import (
    DISPATCH_STATE_COMPLETED,
    DISPATCH_STATE_DELIVERING,
    DISPATCH_STATE_FAILED,
    DISPATCH_STATE_PENDING,
    BatchResult,
    DispatchRequest,
)
from notifier.domain.exceptions import InvalidDocumentSnapshot, describe_exception
from notifier.infrastructure.repositories import DispatchRequestRepository
from notifier.utils import utc_now

from .email_channel import EmailChannel
from .messages import build_mail_message, build_push_message, notification_type_for
from .push_channel import PushChannel
from .recipients import RecipientResolver, ResolvedRecipients

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """What happened to a dispatch request during one attempt."""

    request_id: int
    state: str
    attempts: int = 0
    summary: dict[str, Any] = field(default_factory=dict)
    retry_in: int | None = None
    error: str | None = None

    @property
    def should_retry(self) -> bool:
        return self.retry_in is not None


def validate_snapshot(request: DispatchRequest) -> None:
    """Raise :class:`InvalidDocumentSnapshot` when required fields are missing."""

    missing = []
    if not request.document_id:
        missing.append("document_id")
    if not (request.title or "").strip():
        missing.append("title")
    if request.published_at is None:
        missing.append("published_at")
    if missing:
        raise InvalidDocumentSnapshot(
            "Document snapshot is missing required fields: " + ", ".join(missing)
        )


class DispatchCoordinator:
    """Own the state machine and retry budget of dispatch requests.

    ``pending -> resolving -> delivering -> completed`` on success. Errors
    raised before delivery starts are retried up to
    ``settings.dispatch_max_attempts`` times; individual recipient failures
    never fail the request.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        resolver: RecipientResolver,
        push_channel: PushChannel,
        email_channel: EmailChannel,
        settings: Settings,
    ) -> None:
        self._session_factory = session_factory
        self._resolver = resolver
        self._push_channel = push_channel
        self._email_channel = email_channel
        self._settings = settings

    def dispatch(self, request_id: int) -> DispatchResult | None:
        """Run one attempt of the request; ``None`` when it could not be claimed."""

        request = self._claim(request_id)
        if request is None:
            logger.info("Dispatch request %s is not pending; nothing to do", request_id)
            return None

        logger.info(
            "Dispatching request %s for document %s (attempt %d)",
            request.id,
            request.document_id,
            request.attempts,
        )

        try:
            validate_snapshot(request)
        except InvalidDocumentSnapshot as exc:
            logger.error("Dispatch request %s cannot be delivered: %s", request.id, exc)
            return self._finish(request, DISPATCH_STATE_FAILED, last_error=str(exc))

        try:
            recipients = self._resolver.resolve()
            self._transition(request.id, DISPATCH_STATE_DELIVERING)
        except Exception as exc:
            return self._handle_systemic_failure(request, exc)

        summary = self._deliver(request, recipients)
        if summary["push"]["interrupted"] or summary["email"]["interrupted"]:
            logger.warning(
                "Dispatch request %s interrupted by shutdown; it stays %s",
                request.id,
                DISPATCH_STATE_DELIVERING,
            )
            self._transition(request.id, DISPATCH_STATE_DELIVERING, summary=summary)
            return DispatchResult(
                request_id=request.id,
                state=DISPATCH_STATE_DELIVERING,
                attempts=request.attempts,
                summary=summary,
            )

        logger.info(
            "Dispatch request %s completed: push %s, email %s",
            request.id,
            _counts(summary["push"]),
            _counts(summary["email"]),
        )
        return self._finish(request, DISPATCH_STATE_COMPLETED, summary=summary)

    def retry_failed(self, request_id: int) -> DispatchRequest:
        """Re-arm a failed request with a fresh attempt budget."""

        session = self._session_factory()
        try:
            repository = DispatchRequestRepository(session)
            request = repository.get(request_id)
            if request is None:
                raise ValueError("Dispatch request not found")
            if request.state != DISPATCH_STATE_FAILED:
                raise ValueError("Only failed dispatch requests can be retried")
            logger.info("Operator retry requested for dispatch request %s", request_id)
            return repository.transition(
                request_id,
                DISPATCH_STATE_PENDING,
                attempts=0,
                last_error=None,
                next_attempt_at=None,
            )
        finally:
            session.close()

    def recover_unfinished(self) -> list[int]:
        """Return ids of requests that should be (re)queued after a restart."""

        session = self._session_factory()
        try:
            repository = DispatchRequestRepository(session)
            reset = repository.reset_unfinished()
            pending = repository.list_ids(state=DISPATCH_STATE_PENDING)
        finally:
            session.close()
        if reset:
            logger.warning("Resuming %d interrupted dispatch requests: %s", len(reset), reset)
        return pending

    def _deliver(
        self, request: DispatchRequest, recipients: ResolvedRecipients
    ) -> dict[str, Any]:
        push_message = build_push_message(request, base_url=self._settings.app_base_url)
        mail_message = build_mail_message(request, base_url=self._settings.app_base_url)
        notification_type = notification_type_for(request)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="notifier-channel") as pool:
            push_future = pool.submit(
                self._push_channel.send_many,
                recipients.push,
                push_message,
                dispatch_request_id=request.id,
            )
            email_future = pool.submit(
                self._email_channel.send_batch,
                recipients.email,
                mail_message,
                notification_type=notification_type,
                dispatch_request_id=request.id,
            )
            push_result = _channel_result("push", request.id, push_future)
            email_result = _channel_result("email", request.id, email_future)

        return {
            "push": push_result.as_dict(),
            "email": email_result.as_dict(),
            "rejected": dict(recipients.rejected),
        }

    def _handle_systemic_failure(
        self, request: DispatchRequest, exc: Exception
    ) -> DispatchResult:
        error = describe_exception(exc)
        if request.attempts >= self._settings.dispatch_max_attempts:
            logger.error(
                "Dispatch request %s failed after %d attempts and needs operator attention: %s",
                request.id,
                request.attempts,
                error,
                exc_info=exc,
            )
            return self._finish(request, DISPATCH_STATE_FAILED, last_error=error)

        delay = self._settings.backoff_for_attempt(request.attempts)
        logger.warning(
            "Dispatch request %s attempt %d failed, retrying in %ss: %s",
            request.id,
            request.attempts,
            delay,
            error,
        )
        self._transition(
            request.id,
            DISPATCH_STATE_PENDING,
            last_error=error,
            next_attempt_at=utc_now() + timedelta(seconds=delay),
        )
        return DispatchResult(
            request_id=request.id,
            state=DISPATCH_STATE_PENDING,
            attempts=request.attempts,
            retry_in=delay,
            error=error,
        )

    def _finish(
        self,
        request: DispatchRequest,
        state: str,
        *,
        summary: dict[str, Any] | None = None,
        last_error: str | None = None,
    ) -> DispatchResult:
        changes: dict[str, Any] = {"completed_at": utc_now()}
        if summary is not None:
            changes["summary"] = summary
        if last_error is not None:
            changes["last_error"] = last_error
        self._transition(request.id, state, **changes)
        return DispatchResult(
            request_id=request.id,
            state=state,
            attempts=request.attempts,
            summary=summary or {},
            error=last_error,
        )

    def _claim(self, request_id: int) -> DispatchRequest | None:
        session = self._session_factory()
        try:
            return DispatchRequestRepository(session).claim(request_id)
        finally:
            session.close()

    def _transition(self, request_id: int, state: str, **changes: Any) -> DispatchRequest:
        session = self._session_factory()
        try:
            return DispatchRequestRepository(session).transition(request_id, state, **changes)
        finally:
            session.close()


def _channel_result(channel: str, request_id: int, future) -> BatchResult:
    try:
        return future.result()
    except Exception as exc:
        logger.exception("%s channel crashed for dispatch request %s", channel, request_id)
        return BatchResult(error=describe_exception(exc))


def _counts(result: dict[str, Any]) -> str:
    return f"{result['sent']} sent/{result['failed']} failed/{result['skipped']} skipped"


__all__ = ["DispatchCoordinator", "DispatchResult", "validate_snapshot"]
