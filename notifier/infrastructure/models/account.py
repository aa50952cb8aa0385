"""SQLAlchemy model for registered accounts."""

from sqlalchemy import Boolean, Column, Integer, String

from notifier.infrastructure.database import Base


class AccountModel(Base):
    """Database representation of an account that can receive notifications."""

    __tablename__ = "account"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, default="")
    email = Column(String(255), nullable=True, index=True)
    push_token = Column(String(512), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


__all__ = ["AccountModel"]
