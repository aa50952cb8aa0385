"""Use cases for attaching push tokens to accounts."""

import logging

from sqlalchemy.orm import Session

from notifier.domain.entities import AccountRecipient
from notifier.infrastructure.repositories import RecipientRepository

logger = logging.getLogger(__name__)


def register_device_token(session: Session, account_id: int, token: str) -> AccountRecipient:
    """Store ``token`` as the push token of the account."""

    token = token.strip()
    if not token:
        raise ValueError("Push token must not be empty")
    account = RecipientRepository(session).set_push_token(account_id, token)
    logger.info("Push token registered for account %s", account_id)
    return account


def unregister_device_token(
    session: Session, account_id: int, token: str | None = None
) -> None:
    """Remove the push token of the account, or raise when nothing was removed."""

    repository = RecipientRepository(session)
    if repository.get_account(account_id) is None:
        raise ValueError(f"Account with id {account_id} not found")
    if not repository.clear_push_token(account_id, token=token):
        raise ValueError("Push token not registered for this account")
    logger.info("Push token removed for account %s", account_id)


__all__ = ["register_device_token", "unregister_device_token"]
