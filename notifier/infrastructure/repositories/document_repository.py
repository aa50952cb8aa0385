"""Read access to documents owned by the content management layer."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notifier.domain.entities import Document
from notifier.infrastructure.models import DocumentModel
from notifier.utils import from_db_datetime


class DocumentRepository:
    """Load :class:`Document` snapshots; this core never writes documents."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, document_id: int) -> Document | None:
        model = self.session.get(DocumentModel, document_id)
        if model is None:
            return None
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: DocumentModel) -> Document:
        return Document(
            id=model.id,
            title=model.title,
            body=model.body or "",
            is_published=bool(model.is_published),
            published_at=from_db_datetime(model.published_at),
            updated_at=from_db_datetime(model.updated_at),
        )


__all__ = ["DocumentRepository"]
