"""SQLAlchemy model for the append-only delivery audit trail."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from notifier.infrastructure.database import Base
from notifier.utils import db_now

from .types import json_type


class DeliveryAttemptModel(Base):
    """Database representation of a single delivery attempt."""

    __tablename__ = "delivery_attempt"

    id = Column(Integer, primary_key=True, index=True)
    dispatch_request_id = Column(Integer, nullable=True, index=True)
    channel = Column(String(20), nullable=False)
    notification_type = Column(String(50), nullable=False, default="general", index=True)
    recipient_kind = Column(String(20), nullable=True)
    recipient_id = Column(Integer, nullable=True)
    token = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    message_id = Column(String(255), nullable=True)
    success = Column(Boolean, nullable=False, default=False, index=True)
    error = Column(Text, nullable=True)
    details = Column("metadata", json_type, nullable=False, default=dict)
    created_at = Column(
        DateTime, nullable=False, default=db_now, index=True
    )


__all__ = ["DeliveryAttemptModel"]
