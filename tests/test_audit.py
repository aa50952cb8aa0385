"""Tests for the delivery attempt audit log."""

from __future__ import annotations

import logging

from notifier.application.dispatch.audit import DeliveryAuditLog, redact_token
from notifier.domain.entities import CHANNEL_PUSH, DeliveryAttempt
from notifier.infrastructure.repositories import DeliveryAttemptRepository


def _attempt(**overrides) -> DeliveryAttempt:
    values = dict(
        id=None,
        channel=CHANNEL_PUSH,
        notification_type="document_published",
        title="New document: Report",
        body="x" * 400,
        success=True,
        recipient_kind="account",
        recipient_id=1,
        token="abcdefghijklmnopqrstuvwxyz0123456789",
        message_id="msg-1",
    )
    values.update(overrides)
    return DeliveryAttempt(**values)


def test_redact_token_keeps_strict_prefix() -> None:
    token = "abcdefghijklmnopqrstuvwxyz"

    assert redact_token(token, 15) == "abcdefghijklmno"
    assert redact_token("short", 15) == "sh"
    assert redact_token(None, 15) is None
    assert redact_token("", 15) is None


def test_record_redacts_and_truncates(session_factory, session) -> None:
    audit_log = DeliveryAuditLog(session_factory, body_limit=100, token_prefix=15)

    audit_log.record(_attempt())

    [stored] = DeliveryAttemptRepository(session).list()
    assert stored.token == "abcdefghijklmno"
    assert len(stored.body) == 100
    assert stored.success is True
    assert stored.created_at is not None


def test_record_swallows_storage_errors(caplog) -> None:
    def broken_factory():
        raise RuntimeError("database offline")

    audit_log = DeliveryAuditLog(broken_factory)

    with caplog.at_level(logging.ERROR):
        audit_log.record(_attempt(success=False, error="boom"))

    assert "Failed to record push delivery attempt" in caplog.text


def test_repository_filters_and_summary(session_factory, session) -> None:
    audit_log = DeliveryAuditLog(session_factory)
    audit_log.record(_attempt())
    audit_log.record(_attempt(success=False, error="unregistered", recipient_id=2))
    audit_log.record(
        _attempt(channel="email", token=None, address="reader@company.com", recipient_id=3)
    )

    repository = DeliveryAttemptRepository(session)

    assert len(repository.list(success=False)) == 1
    assert len(repository.list(channel="email")) == 1
    assert len(repository.list(notification_type="document_updated")) == 0
    assert repository.summarize() == {
        "email": {"total": 1, "successful": 1, "failed": 0},
        "push": {"total": 2, "successful": 1, "failed": 1},
    }
