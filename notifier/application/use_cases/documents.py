"""Use cases that start notification dispatches for documents."""

from sqlalchemy.orm import Session

from notifier.application.dispatch import TransitionGuard
from notifier.domain.entities import DispatchRequest, DocumentPublished
from notifier.infrastructure.repositories import DocumentRepository


class DocumentNotPublishedError(ValueError):
    """Raised when notifications are requested for an unpublished document."""


def request_publish_notifications(
    session: Session, guard: TransitionGuard, document_id: int
) -> DispatchRequest | None:
    """Open the publish dispatch for a stored document.

    Returns ``None`` when the publication was already dispatched.
    """

    document = DocumentRepository(session).get(document_id)
    if document is None:
        raise ValueError("Document not found")
    if not document.is_published:
        raise DocumentNotPublishedError("Document is not published")
    return guard.open(DocumentPublished.from_document(document))


__all__ = ["DocumentNotPublishedError", "request_publish_notifications"]
