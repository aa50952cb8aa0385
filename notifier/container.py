"""Assemble the dispatch engine from settings and infrastructure."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from notifier.application.dispatch import (
    BoundedCaller,
    DeliveryAuditLog,
    DispatchCoordinator,
    DispatchWorkerPool,
    EmailAddressPolicy,
    EmailChannel,
    PushChannel,
    RecipientResolver,
    TransitionGuard,
)
from notifier.config import Settings
from notifier.infrastructure.email import MailTransport, SendGridMailTransport
from notifier.infrastructure.push import PushTransport, build_push_transport
from notifier.infrastructure.rate_limiter import DatabaseRateLimiter, RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class DispatchService:
    """Running dispatch engine shared by the HTTP layer."""

    settings: Settings
    guard: TransitionGuard
    coordinator: DispatchCoordinator
    workers: DispatchWorkerPool
    push_channel: PushChannel
    rate_limiter: RateLimiter
    caller: BoundedCaller
    push_transport: PushTransport
    mail_transport: MailTransport

    def start(self) -> list[int]:
        """Start the worker pool and queue requests left by a previous run."""

        purged = self.rate_limiter.purge_expired()
        if purged:
            logger.info("Removed %d expired push cooldowns", purged)
        self.workers.start()
        return self.workers.recover()

    def shutdown(self, wait: bool = True) -> None:
        self.workers.shutdown(wait=wait)
        self.caller.shutdown(wait=False)
        close = getattr(self.push_transport, "close", None)
        if callable(close):
            close()


def build_dispatch_service(
    settings: Settings,
    session_factory: Callable[[], Session],
    *,
    push_transport: PushTransport | None = None,
    mail_transport: MailTransport | None = None,
    rate_limiter: RateLimiter | None = None,
) -> DispatchService:
    """Wire every dispatch component with explicit dependencies."""

    push_transport = push_transport or build_push_transport(settings)
    if mail_transport is None:
        mail_transport = SendGridMailTransport.from_settings(settings)
        if not mail_transport.is_configured:
            logger.warning("SendGrid is not configured; email notifications will fail")
    rate_limiter = rate_limiter or DatabaseRateLimiter(session_factory)

    stop_event = threading.Event()
    policy = EmailAddressPolicy(
        settings.disallowed_email_domains,
        settings.disallowed_email_domain_fragments,
    )
    audit_log = DeliveryAuditLog(
        session_factory,
        body_limit=settings.audit_body_limit,
        token_prefix=settings.audit_token_prefix,
    )
    # Every dispatch worker may run a full push fan-out plus one email send.
    caller = BoundedCaller(settings.dispatch_workers * (settings.push_concurrency + 1))

    push_channel = PushChannel(
        push_transport,
        rate_limiter,
        audit_log,
        caller,
        cooldown_seconds=settings.push_cooldown_seconds,
        timeout_seconds=settings.push_timeout_seconds,
        concurrency=settings.push_concurrency,
        stop_event=stop_event,
    )
    email_channel = EmailChannel(
        mail_transport,
        audit_log,
        caller,
        session_factory,
        policy=policy,
        batch_size=settings.email_batch_size,
        timeout_seconds=settings.mail_timeout_seconds,
        stop_event=stop_event,
    )
    coordinator = DispatchCoordinator(
        session_factory,
        RecipientResolver(session_factory, policy=policy),
        push_channel,
        email_channel,
        settings,
    )
    workers = DispatchWorkerPool(
        coordinator, max_workers=settings.dispatch_workers, stop_event=stop_event
    )
    guard = TransitionGuard(
        session_factory,
        enqueue=workers.submit,
        renotify_on_content_update=settings.renotify_on_content_update,
    )
    return DispatchService(
        settings=settings,
        guard=guard,
        coordinator=coordinator,
        workers=workers,
        push_channel=push_channel,
        rate_limiter=rate_limiter,
        caller=caller,
        push_transport=push_transport,
        mail_transport=mail_transport,
    )


__all__ = ["DispatchService", "build_dispatch_service"]
