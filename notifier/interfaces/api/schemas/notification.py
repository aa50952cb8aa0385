"""Schemas for push notifications sent outside a document dispatch."""

from pydantic import BaseModel, Field

from notifier.domain.entities import BatchResult, DeliveryOutcome

from .event import TITLE_MAX_LENGTH


class BroadcastCreate(BaseModel):
    """Payload of an announcement pushed to every registered device."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    body: str = Field(..., min_length=1)
    data: dict[str, str] = Field(default_factory=dict)


class BroadcastResult(BaseModel):
    sent: int
    failed: int
    skipped: int
    skip_reasons: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_batch(cls, result: BatchResult) -> "BroadcastResult":
        return cls(
            sent=result.sent,
            failed=result.failed,
            skipped=result.skipped,
            skip_reasons=dict(result.skip_reasons),
        )


class PushOutcomeRead(BaseModel):
    """Result of a single push delivery."""

    status: str
    success: bool
    message_id: str | None = None
    error: str | None = None
    reason: str | None = None

    @classmethod
    def from_outcome(cls, outcome: DeliveryOutcome) -> "PushOutcomeRead":
        return cls(
            status=outcome.status,
            success=outcome.success,
            message_id=outcome.message_id,
            error=outcome.error,
            reason=outcome.reason,
        )


__all__ = ["BroadcastCreate", "BroadcastResult", "PushOutcomeRead"]
