"""Domain entity for the unit of work created per publish transition."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

DISPATCH_STATE_PENDING = "pending"
DISPATCH_STATE_RESOLVING = "resolving"
DISPATCH_STATE_DELIVERING = "delivering"
DISPATCH_STATE_COMPLETED = "completed"
DISPATCH_STATE_FAILED = "failed"

DISPATCH_STATES = (
    DISPATCH_STATE_PENDING,
    DISPATCH_STATE_RESOLVING,
    DISPATCH_STATE_DELIVERING,
    DISPATCH_STATE_COMPLETED,
    DISPATCH_STATE_FAILED,
)
UNFINISHED_DISPATCH_STATES = (DISPATCH_STATE_RESOLVING, DISPATCH_STATE_DELIVERING)

TRIGGER_PUBLISHED = "published"
TRIGGER_CONTENT_UPDATED = "content_updated"


def build_idempotency_key(
    document_id: int, trigger: str, transition_at: datetime | None
) -> str:
    """Return the key that identifies one logical document transition."""

    marker = transition_at.isoformat() if transition_at is not None else "-"
    return f"{document_id}:{trigger}:{marker}"


@dataclass
class DispatchRequest:
    """Notification fan-out requested for a document transition."""

    id: int | None
    idempotency_key: str
    document_id: int
    trigger: str
    title: str
    body: str
    published_at: datetime | None
    transition_at: datetime | None = None
    state: str = DISPATCH_STATE_PENDING
    attempts: int = 0
    last_error: str | None = None
    summary: dict[str, Any] = field(default_factory=dict)
    next_attempt_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

__all__ = [
    "DispatchRequest",
    "build_idempotency_key",
    "DISPATCH_STATE_PENDING",
    "DISPATCH_STATE_RESOLVING",
    "DISPATCH_STATE_DELIVERING",
    "DISPATCH_STATE_COMPLETED",
    "DISPATCH_STATE_FAILED",
    "DISPATCH_STATES",
    "UNFINISHED_DISPATCH_STATES",
    "TRIGGER_PUBLISHED",
    "TRIGGER_CONTENT_UPDATED",
]
