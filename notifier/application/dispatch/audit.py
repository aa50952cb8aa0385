"""Append-only audit trail of delivery attempts."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from sqlalchemy.orm import Session

from notifier.domain.entities import DeliveryAttempt
from notifier.infrastructure.repositories import DeliveryAttemptRepository

logger = logging.getLogger(__name__)

TITLE_LIMIT = 255


def redact_token(token: str | None, prefix_length: int) -> str | None:
    """Return a strict prefix of ``token`` at most ``prefix_length`` long.

    Short tokens keep only their first half so the stored value never equals
    the original.
    """

    if not token:
        return None
    if len(token) > prefix_length:
        return token[:prefix_length]
    return token[: len(token) // 2]


def truncate(value: str | None, limit: int) -> str | None:
    if value is None:
        return None
    return value[:limit]


class DeliveryAuditLog:
    """Persist :class:`DeliveryAttempt` rows; never raises to the caller."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        body_limit: int = 100,
        token_prefix: int = 15,
    ) -> None:
        self._session_factory = session_factory
        self._body_limit = body_limit
        self._token_prefix = token_prefix

    def sanitize(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        """Return ``attempt`` with the token redacted and long fields truncated."""

        return replace(
            attempt,
            token=redact_token(attempt.token, self._token_prefix),
            title=truncate(attempt.title, TITLE_LIMIT) or "",
            body=truncate(attempt.body, self._body_limit),
        )

    def record(self, attempt: DeliveryAttempt) -> None:
        entry = self.sanitize(attempt)
        try:
            session = self._session_factory()
            try:
                DeliveryAttemptRepository(session).create(entry)
            finally:
                session.close()
        except Exception:
            logger.exception(
                "Failed to record %s delivery attempt for recipient %s",
                entry.channel,
                entry.recipient_id,
            )


__all__ = ["DeliveryAuditLog", "redact_token", "truncate"]
