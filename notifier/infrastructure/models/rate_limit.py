"""SQLAlchemy model for push cooldown entries."""

from sqlalchemy import Column, DateTime, String

from notifier.infrastructure.database import Base


class RateLimitEntryModel(Base):
    """A key that may not be used again before ``expires_at``."""

    __tablename__ = "rate_limit_entry"

    key = Column(String(255), primary_key=True)
    expires_at = Column(DateTime, nullable=False, index=True)


__all__ = ["RateLimitEntryModel"]
