"""Use cases for push notifications that are not tied to a document."""

import logging

from sqlalchemy.orm import Session

from notifier.application.dispatch import PushChannel
from notifier.application.dispatch.messages import (
    build_broadcast_push_message,
    build_test_push_message,
)
from notifier.domain.entities import BatchResult, DeliveryOutcome
from notifier.infrastructure.repositories import RecipientRepository

logger = logging.getLogger(__name__)


class MissingPushTokenError(ValueError):
    """Raised when the target account has no push token registered."""


def send_test_notification(
    session: Session, push_channel: PushChannel, account_id: int, *, base_url: str
) -> DeliveryOutcome:
    """Send a fixed test push to one account through the regular channel."""

    account = RecipientRepository(session).get_account(account_id)
    if account is None:
        raise ValueError(f"Account with id {account_id} not found")
    if not account.has_push_token():
        raise MissingPushTokenError("Account has no push token registered")

    outcome = push_channel.send(account, build_test_push_message(base_url=base_url))
    logger.info("Test push to account %s finished: %s", account_id, outcome.status)
    return outcome


def broadcast_notification(
    session: Session,
    push_channel: PushChannel,
    *,
    title: str,
    body: str,
    base_url: str,
    data: dict[str, str] | None = None,
) -> BatchResult:
    """Push a free-form announcement to every account with a push token."""

    recipients = list(RecipientRepository(session).list_push_capable_accounts())
    message = build_broadcast_push_message(title, body, base_url=base_url, data=data)
    logger.info("Broadcasting push %r to %d accounts", title, len(recipients))
    return push_channel.send_many(recipients, message)


__all__ = ["MissingPushTokenError", "broadcast_notification", "send_test_notification"]
