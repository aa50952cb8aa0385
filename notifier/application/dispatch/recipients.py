"""Compute who should hear about a published document."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable

from sqlalchemy.orm import Session

from notifier.domain.entities import (
    AccountRecipient,
    Recipient,
    SubscriberRecipient,
)
from notifier.infrastructure.repositories import RecipientRepository

from .validators import EmailAddressPolicy

logger = logging.getLogger(__name__)


@dataclass
class ResolvedRecipients:
    """Recipient sets for both channels plus the email rejections by reason."""

    push: list[AccountRecipient] = field(default_factory=list)
    email: list[Recipient] = field(default_factory=list)
    rejected: Counter = field(default_factory=Counter)

    @property
    def is_empty(self) -> bool:
        return not self.push and not self.email


class RecipientResolver:
    """Read the recipient store and split it into push and email audiences."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        policy: EmailAddressPolicy,
    ) -> None:
        self._session_factory = session_factory
        self._policy = policy

    def resolve(self) -> ResolvedRecipients:
        """Return the push and email recipient sets.

        Storage errors propagate; the coordinator decides whether to retry.
        """

        session = self._session_factory()
        try:
            repository = RecipientRepository(session)
            push_accounts = list(repository.list_push_capable_accounts())
            email_accounts = list(repository.list_accounts_with_email())
            subscribers = list(repository.list_active_subscribers())
        finally:
            session.close()

        resolved = ResolvedRecipients(
            push=[account for account in push_accounts if account.has_push_token()]
        )

        by_address: dict[str, Recipient] = {}
        candidates: list[Recipient] = [*email_accounts, *subscribers]
        for recipient in candidates:
            reason = self._policy.rejection_reason(recipient.email)
            if reason is not None:
                resolved.rejected[reason] += 1
                logger.warning(
                    "Excluding %s %s from email delivery: %s",
                    recipient.kind,
                    recipient.id,
                    reason,
                )
                continue

            normalized = recipient.email.strip().casefold()
            existing = by_address.get(normalized)
            if existing is None or isinstance(recipient, SubscriberRecipient):
                # Subscriber entries take precedence over accounts.
                by_address[normalized] = recipient

        resolved.email = list(by_address.values())

        logger.info(
            "Resolved %d push recipients and %d email recipients (%d excluded)",
            len(resolved.push),
            len(resolved.email),
            sum(resolved.rejected.values()),
        )
        return resolved


__all__ = ["RecipientResolver", "ResolvedRecipients"]
