"""Domain entities describing publishable documents and their events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Document:
    """Snapshot of a document as written by the content management layer."""

    id: int | None
    title: str
    body: str
    is_published: bool
    published_at: datetime | None = None
    updated_at: datetime | None = None
    changed_fields: frozenset[str] = field(default_factory=frozenset)

    def was_changed(self, field_name: str) -> bool:
        """Return ``True`` when ``field_name`` changed on the current write."""

        return field_name in self.changed_fields


@dataclass(frozen=True)
class DocumentPublished:
    """Event emitted once a document becomes visible to recipients."""

    document_id: int
    title: str
    body: str
    published_at: datetime | None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentPublished":
        if document.id is None:
            raise ValueError("Only persisted documents can be published")
        return cls(
            document_id=document.id,
            title=document.title,
            body=document.body,
            published_at=document.published_at,
        )


__all__ = ["Document", "DocumentPublished"]
