"""SQLAlchemy model for documents owned by the content management layer."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from notifier.infrastructure.database import Base


class DocumentModel(Base):
    """Database representation of a publishable document."""

    __tablename__ = "document"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False, default="")
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)


__all__ = ["DocumentModel"]
