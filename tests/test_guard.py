"""Tests for publish transition detection."""

from __future__ import annotations

import logging
from datetime import timedelta, timezone

import pytest

from notifier.application.dispatch.guard import TransitionGuard
from notifier.application.use_cases.documents import request_publish_notifications
from notifier.domain.entities import (
    TRIGGER_CONTENT_UPDATED,
    TRIGGER_PUBLISHED,
    Document,
    DocumentPublished,
)
from notifier.infrastructure.repositories import DispatchRequestRepository
from tests.conftest import PUBLISHED_AT, add_document


def _document(**overrides) -> Document:
    values = dict(
        id=10,
        title="Handbook",
        body="Chapter one",
        is_published=True,
        published_at=PUBLISHED_AT,
        updated_at=PUBLISHED_AT,
    )
    values.update(overrides)
    return Document(**values)


@pytest.fixture()
def queued() -> list[int]:
    return []


@pytest.fixture()
def guard(session_factory, queued) -> TransitionGuard:
    return TransitionGuard(session_factory, enqueue=queued.append)


def test_publish_transition_detection() -> None:
    published = _document()
    draft = _document(is_published=False, published_at=None)

    assert TransitionGuard.is_publish_transition(published, draft)
    assert TransitionGuard.is_publish_transition(published, None)
    assert not TransitionGuard.is_publish_transition(published, published)
    assert not TransitionGuard.is_publish_transition(draft, None)
    assert not TransitionGuard.is_publish_transition(
        _document(changed_fields=frozenset({"title"})), None
    )
    assert TransitionGuard.is_publish_transition(
        _document(changed_fields=frozenset({"is_published"})), None
    )


def test_handle_dispatches_once_per_publication(guard, queued, session) -> None:
    draft = _document(is_published=False, published_at=None)
    published = _document()

    created = guard.handle(published, draft)
    resaved = guard.handle(published, published)
    replayed = guard.handle(published, draft)

    assert created is not None
    assert created.trigger == TRIGGER_PUBLISHED
    assert created.idempotency_key == f"10:published:{PUBLISHED_AT.isoformat()}"
    assert resaved is None
    assert replayed is None
    assert queued == [created.id]
    assert len(DispatchRequestRepository(session).list()) == 1


def test_republication_is_a_new_transition(guard, queued) -> None:
    draft = _document(is_published=False)
    first = guard.handle(_document(), draft)
    second = guard.handle(_document(published_at=PUBLISHED_AT + timedelta(days=1)), draft)

    assert first is not None and second is not None
    assert queued == [first.id, second.id]


def test_content_update_ignored_by_default(guard, queued) -> None:
    before = _document()
    after = _document(body="Chapter one, revised", updated_at=PUBLISHED_AT + timedelta(hours=1))

    assert guard.handle(after, before) is None
    assert queued == []


def test_content_update_opens_distinct_request_when_enabled(session_factory, queued) -> None:
    guard = TransitionGuard(
        session_factory, enqueue=queued.append, renotify_on_content_update=True
    )
    before = _document()
    after = _document(body="Chapter one, revised", updated_at=PUBLISHED_AT + timedelta(hours=1))

    request = guard.handle(after, before)

    assert request is not None
    assert request.trigger == TRIGGER_CONTENT_UPDATED
    assert request.idempotency_key.startswith("10:content_updated:")
    assert guard.handle(after, before) is None
    assert guard.handle(after, after) is None


def test_unpersisted_document_is_rejected(guard) -> None:
    with pytest.raises(ValueError):
        guard.handle(_document(id=None), None)


def test_same_instant_in_any_representation_opens_one_request(guard, queued) -> None:
    """Naive, UTC and offset timestamps of one publication share a key."""

    aware = PUBLISHED_AT.replace(microsecond=123456)
    representations = [
        aware,
        aware.replace(tzinfo=None),
        aware.astimezone(timezone(timedelta(hours=2))),
        aware.astimezone(timezone(timedelta(hours=-5))).replace(microsecond=0),
    ]

    results = [
        guard.open(DocumentPublished(document_id=1, title="T", body="b", published_at=value))
        for value in representations
    ]

    assert results[0] is not None
    assert results[1:] == [None, None, None]
    assert queued == [results[0].id]
    assert results[0].idempotency_key == "1:published:2024-05-01T09:30:00+00:00"


def test_stored_document_matches_announced_publication(guard, queued, session) -> None:
    document = add_document(session)
    announced = DocumentPublished(
        document_id=document.id,
        title=document.title,
        body=document.body,
        published_at=PUBLISHED_AT.astimezone(timezone(timedelta(hours=-5))),
    )

    first = guard.open(announced)
    second = request_publish_notifications(session, guard, document.id)

    assert first is not None
    assert second is None
    assert queued == [first.id]


def test_content_update_without_edit_time_is_not_dispatched(
    session_factory, queued, caplog
) -> None:
    guard = TransitionGuard(
        session_factory, enqueue=queued.append, renotify_on_content_update=True
    )
    v1 = _document(updated_at=None)
    v2 = _document(body="Second draft", updated_at=None)
    v3 = _document(body="Third draft", updated_at=None)

    with caplog.at_level(logging.WARNING):
        assert guard.handle(v2, v1) is None
        assert guard.handle(v3, v2) is None

    assert queued == []
    assert "carries no updated_at" in caplog.text
    with pytest.raises(ValueError):
        guard.open(DocumentPublished.from_document(v2), trigger=TRIGGER_CONTENT_UPDATED)


def test_successive_content_updates_each_dispatch(session_factory, queued) -> None:
    guard = TransitionGuard(
        session_factory, enqueue=queued.append, renotify_on_content_update=True
    )
    v1 = _document()
    v2 = _document(body="Second draft", updated_at=PUBLISHED_AT + timedelta(hours=1))
    v3 = _document(body="Third draft", updated_at=PUBLISHED_AT + timedelta(hours=2))

    first = guard.handle(v2, v1)
    second = guard.handle(v3, v2)

    assert first is not None and second is not None
    assert first.idempotency_key != second.idempotency_key
    assert queued == [first.id, second.id]
