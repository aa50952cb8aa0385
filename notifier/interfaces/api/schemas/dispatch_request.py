"""Schemas for dispatch request endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DispatchRequestRead(BaseModel):
    """Representation of a dispatch request returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    idempotency_key: str
    document_id: int
    trigger: str
    title: str
    published_at: datetime | None
    transition_at: datetime | None
    state: str
    attempts: int
    last_error: str | None
    summary: dict[str, Any] = Field(default_factory=dict)
    next_attempt_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
    completed_at: datetime | None


class DispatchAccepted(BaseModel):
    """Response of the endpoints that may open a dispatch request."""

    created: bool
    request_id: int | None = None
    state: str | None = None


__all__ = ["DispatchAccepted", "DispatchRequestRead"]
