"""SQLAlchemy model for dispatch requests."""

from sqlalchemy import Column, DateTime, Integer, String, Text

from notifier.infrastructure.database import Base
from notifier.utils import db_now

from .types import json_type


class DispatchRequestModel(Base):
    """Database representation of a notification fan-out request."""

    __tablename__ = "dispatch_request"

    id = Column(Integer, primary_key=True, index=True)
    idempotency_key = Column(String(120), nullable=False, unique=True)
    document_id = Column(Integer, nullable=False, index=True)
    trigger = Column(String(30), nullable=False)
    transition_at = Column(DateTime, nullable=True)
    title = Column(String(255), nullable=False, default="")
    body = Column(Text, nullable=False, default="")
    published_at = Column(DateTime, nullable=True)
    state = Column(String(20), nullable=False, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    summary = Column(json_type, nullable=False, default=dict)
    next_attempt_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=db_now)
    updated_at = Column(DateTime, nullable=True, onupdate=db_now)
    completed_at = Column(DateTime, nullable=True)


__all__ = ["DispatchRequestModel"]
