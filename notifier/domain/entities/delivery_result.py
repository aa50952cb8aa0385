"""Value objects describing the outcome of delivery operations."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

OUTCOME_SENT = "sent"
OUTCOME_FAILED = "failed"
OUTCOME_SKIPPED = "skipped"
OUTCOME_RATE_LIMITED = "rate_limited"

SKIP_NO_PUSH_TOKEN = "no push token"
SKIP_MISSING_ADDRESS = "missing address"
SKIP_DISALLOWED_DOMAIN = "disallowed domain"
SKIP_INVALID_ADDRESS = "invalid address"
SKIP_RATE_LIMITED = "rate limited"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of trying to reach one recipient on one channel."""

    channel: str
    status: str
    recipient_id: int | None = None
    message_id: str | None = None
    error: str | None = None
    reason: str | None = None

    @property
    def success(self) -> bool:
        return self.status == OUTCOME_SENT


@dataclass
class BatchResult:
    """Aggregate counters for a channel invocation."""

    sent: int = 0
    skipped: int = 0
    failed: int = 0
    skip_reasons: Counter = field(default_factory=Counter)
    interrupted: bool = False
    error: str | None = None

    def add(self, outcome: DeliveryOutcome) -> None:
        if outcome.status == OUTCOME_SENT:
            self.sent += 1
        elif outcome.status == OUTCOME_FAILED:
            self.failed += 1
        else:
            self.skipped += 1
            self.skip_reasons[outcome.reason or outcome.status] += 1

    def as_dict(self) -> dict[str, Any]:
        return {
            "sent": self.sent,
            "skipped": self.skipped,
            "failed": self.failed,
            "skip_reasons": dict(self.skip_reasons),
            "interrupted": self.interrupted,
            "error": self.error,
        }


__all__ = [
    "BatchResult",
    "DeliveryOutcome",
    "OUTCOME_SENT",
    "OUTCOME_FAILED",
    "OUTCOME_SKIPPED",
    "OUTCOME_RATE_LIMITED",
    "SKIP_NO_PUSH_TOKEN",
    "SKIP_MISSING_ADDRESS",
    "SKIP_DISALLOWED_DOMAIN",
    "SKIP_INVALID_ADDRESS",
    "SKIP_RATE_LIMITED",
]
