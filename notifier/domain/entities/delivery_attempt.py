"""Domain entity representing the audit record of a single send attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CHANNEL_PUSH = "push"
CHANNEL_EMAIL = "email"

NOTIFICATION_DOCUMENT_PUBLISHED = "document_published"
NOTIFICATION_DOCUMENT_UPDATED = "document_updated"
NOTIFICATION_BROADCAST = "broadcast"
NOTIFICATION_TEST = "test"


@dataclass
class DeliveryAttempt:
    """Immutable record of one delivery on one channel to one recipient."""

    id: int | None
    channel: str
    notification_type: str
    title: str
    body: str | None
    success: bool
    recipient_kind: str | None = None
    recipient_id: int | None = None
    token: str | None = None
    address: str | None = None
    message_id: str | None = None
    error: str | None = None
    dispatch_request_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


__all__ = [
    "DeliveryAttempt",
    "CHANNEL_PUSH",
    "CHANNEL_EMAIL",
    "NOTIFICATION_DOCUMENT_PUBLISHED",
    "NOTIFICATION_DOCUMENT_UPDATED",
    "NOTIFICATION_BROADCAST",
    "NOTIFICATION_TEST",
]
