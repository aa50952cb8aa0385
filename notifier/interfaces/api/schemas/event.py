"""Schemas describing inbound document events."""

from datetime import datetime

from pydantic import BaseModel, Field

from notifier.domain.entities import Document, DocumentPublished

TITLE_MAX_LENGTH = 255


class DocumentPublishedEvent(BaseModel):
    """Payload announcing that a document was published."""

    document_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    body: str = ""
    published_at: datetime

    def to_event(self) -> DocumentPublished:
        return DocumentPublished(
            document_id=self.document_id,
            title=self.title,
            body=self.body,
            published_at=self.published_at,
        )


class DocumentState(BaseModel):
    """Document fields as seen before or after a write."""

    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    body: str = ""
    is_published: bool = False
    published_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentSavedEvent(BaseModel):
    """Payload sent by the content layer after every document write."""

    document_id: int = Field(..., gt=0)
    current: DocumentState
    previous: DocumentState | None = None
    changed_fields: list[str] = Field(default_factory=list)

    def to_documents(self) -> tuple[Document, Document | None]:
        current = Document(
            id=self.document_id,
            changed_fields=frozenset(self.changed_fields),
            **self.current.model_dump(),
        )
        previous = None
        if self.previous is not None:
            previous = Document(id=self.document_id, **self.previous.model_dump())
        return current, previous


__all__ = ["DocumentPublishedEvent", "DocumentSavedEvent", "DocumentState"]
