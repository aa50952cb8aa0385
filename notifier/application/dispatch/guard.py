"""Detect document transitions and open exactly one dispatch request per transition."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from notifier.domain.entities import (
    TRIGGER_CONTENT_UPDATED,
    TRIGGER_PUBLISHED,
    DispatchRequest,
    Document,
    DocumentPublished,
    build_idempotency_key,
)
from notifier.infrastructure.repositories import DispatchRequestRepository
from notifier.utils import transition_marker

logger = logging.getLogger(__name__)

Enqueue = Callable[[int], None]


class TransitionGuard:
    """Observer entrypoint called by the content layer after every document write."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        enqueue: Enqueue | None = None,
        renotify_on_content_update: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._enqueue = enqueue
        self._renotify_on_content_update = renotify_on_content_update

    def bind(self, enqueue: Enqueue) -> None:
        self._enqueue = enqueue

    @staticmethod
    def is_publish_transition(document: Document, previous: Document | None) -> bool:
        """Return ``True`` when ``document`` just became published."""

        if not document.is_published:
            return False
        if previous is not None:
            return not previous.is_published
        # Without the previous row, trust the write's change set when it has one.
        return not document.changed_fields or document.was_changed("is_published")

    @staticmethod
    def is_content_update(document: Document, previous: Document | None) -> bool:
        """Return ``True`` for an edit of title or body on a published document."""

        if not document.is_published or previous is None or not previous.is_published:
            return False
        return document.title != previous.title or document.body != previous.body

    def handle(
        self, document: Document, previous: Document | None = None
    ) -> DispatchRequest | None:
        """Open the dispatch request implied by a document write, if any."""

        if self.is_publish_transition(document, previous):
            return self.open(DocumentPublished.from_document(document))

        if self._renotify_on_content_update and self.is_content_update(document, previous):
            if document.updated_at is None:
                logger.warning(
                    "Content update of document %s carries no updated_at; not notifying",
                    document.id,
                )
                return None
            return self.open(
                DocumentPublished.from_document(document),
                trigger=TRIGGER_CONTENT_UPDATED,
                transition_at=document.updated_at,
            )

        logger.debug("Document %s write is not a notifiable transition", document.id)
        return None

    def open(
        self,
        event: DocumentPublished,
        *,
        trigger: str = TRIGGER_PUBLISHED,
        transition_at: datetime | None = None,
    ) -> DispatchRequest | None:
        """Create the dispatch request for ``event`` unless it already exists.

        Returns the new request, or ``None`` when the transition was already
        handled. Only a newly created request is enqueued.
        """

        if trigger == TRIGGER_CONTENT_UPDATED and transition_at is None:
            raise ValueError("A content update needs the time of the edit")
        marker = transition_at if transition_at is not None else event.published_at
        if marker is not None:
            marker = transition_marker(marker)
        key = build_idempotency_key(event.document_id, trigger, marker)
        candidate = DispatchRequest(
            id=None,
            idempotency_key=key,
            document_id=event.document_id,
            trigger=trigger,
            title=event.title,
            body=event.body,
            published_at=event.published_at,
            transition_at=marker,
        )

        session = self._session_factory()
        try:
            request = DispatchRequestRepository(session).create_if_absent(candidate)
        finally:
            session.close()

        if request is None:
            logger.info("Dispatch for %s already requested; ignoring duplicate", key)
            return None

        logger.info(
            "Opened dispatch request %s for document %s (%s)",
            request.id,
            request.document_id,
            trigger,
        )
        if self._enqueue is not None:
            self._enqueue(request.id)
        return request


__all__ = ["TransitionGuard"]
