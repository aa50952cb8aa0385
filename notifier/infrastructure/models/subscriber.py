"""SQLAlchemy model for email-only subscribers."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from notifier.infrastructure.database import Base


class SubscriberModel(Base):
    """Database representation of an opt-in email subscriber."""

    __tablename__ = "subscriber"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_notified_at = Column(DateTime, nullable=True)


__all__ = ["SubscriberModel"]
