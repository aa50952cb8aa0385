"""Domain entities for the people that receive document notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Union

RECIPIENT_ACCOUNT = "account"
RECIPIENT_SUBSCRIBER = "subscriber"


@dataclass
class AccountRecipient:
    """Registered account that may hold a push device token."""

    kind: ClassVar[str] = RECIPIENT_ACCOUNT

    id: int | None
    name: str
    email: str | None
    push_token: str | None = None
    is_active: bool = True

    def has_push_token(self) -> bool:
        return bool(self.push_token)

    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())


@dataclass
class SubscriberRecipient:
    """Opt-in email subscriber without an account."""

    kind: ClassVar[str] = RECIPIENT_SUBSCRIBER

    id: int | None
    email: str
    is_active: bool = True
    last_notified_at: datetime | None = None

    def has_push_token(self) -> bool:
        return False

    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())


Recipient = Union[AccountRecipient, SubscriberRecipient]


__all__ = [
    "AccountRecipient",
    "SubscriberRecipient",
    "Recipient",
    "RECIPIENT_ACCOUNT",
    "RECIPIENT_SUBSCRIBER",
]
