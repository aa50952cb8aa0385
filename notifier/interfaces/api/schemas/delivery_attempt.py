"""Schemas for delivery attempt endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DeliveryAttemptRead(BaseModel):
    """Representation of a delivery attempt returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    dispatch_request_id: int | None
    channel: str
    notification_type: str
    recipient_kind: str | None
    recipient_id: int | None
    token: str | None
    address: str | None
    title: str
    body: str | None
    message_id: str | None
    success: bool
    error: str | None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None


class ChannelSummary(BaseModel):
    total: int
    successful: int
    failed: int


class DeliveryAttemptSummary(BaseModel):
    """Aggregated delivery counters per channel."""

    channels: dict[str, ChannelSummary] = Field(default_factory=dict)
    total: int = 0
    successful: int = 0
    failed: int = 0

    @classmethod
    def from_counts(cls, counts: dict[str, dict[str, int]]) -> "DeliveryAttemptSummary":
        channels = {name: ChannelSummary(**values) for name, values in counts.items()}
        return cls(
            channels=channels,
            total=sum(item.total for item in channels.values()),
            successful=sum(item.successful for item in channels.values()),
            failed=sum(item.failed for item in channels.values()),
        )


__all__ = ["ChannelSummary", "DeliveryAttemptRead", "DeliveryAttemptSummary"]
