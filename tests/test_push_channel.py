"""Tests for the push channel."""

from __future__ import annotations

import threading
import time

import pytest

from notifier.application.dispatch.audit import DeliveryAuditLog
from notifier.application.dispatch.push_channel import PushChannel, rate_limit_key
from notifier.application.dispatch.timeouts import BoundedCaller
from notifier.domain.entities import (
    OUTCOME_FAILED,
    OUTCOME_RATE_LIMITED,
    OUTCOME_SENT,
    OUTCOME_SKIPPED,
    SKIP_NO_PUSH_TOKEN,
    AccountRecipient,
    SubscriberRecipient,
)
from notifier.infrastructure.push import PushMessage
from notifier.infrastructure.rate_limiter import DatabaseRateLimiter, InMemoryRateLimiter
from notifier.infrastructure.repositories import DeliveryAttemptRepository
from tests.conftest import FakePushTransport

MESSAGE = PushMessage(
    title="New document: Report",
    body="Results",
    link="https://docs.local/documents/1",
    data={"document_id": "1", "notification_type": "document_published"},
)


class RecordingAuditLog:
    def __init__(self) -> None:
        self.attempts = []
        self._lock = threading.Lock()

    def record(self, attempt) -> None:
        with self._lock:
            self.attempts.append(attempt)


@pytest.fixture()
def caller():
    caller = BoundedCaller(8)
    yield caller
    caller.shutdown()


def _accounts(count: int) -> list[AccountRecipient]:
    return [
        AccountRecipient(id=index, name=f"Account {index}", email=None, push_token=f"token-{index}")
        for index in range(1, count + 1)
    ]


def test_rate_limit_key_prefers_recipient_id() -> None:
    assert rate_limit_key(AccountRecipient(id=7, name="A", email=None, push_token="t")) == "push:7"
    anonymous = rate_limit_key(AccountRecipient(id=None, name="A", email=None, push_token="t"))
    assert anonymous.startswith("push:") and len(anonymous) == len("push:") + 64


def test_send_success_is_audited(session_factory, session, caller) -> None:
    transport = FakePushTransport()
    channel = PushChannel(
        transport, InMemoryRateLimiter(), DeliveryAuditLog(session_factory), caller
    )

    outcome = channel.send(_accounts(1)[0], MESSAGE, dispatch_request_id=None)

    assert outcome.status == OUTCOME_SENT
    assert outcome.message_id == "msg-1"
    [(token, sent)] = transport.sent
    assert token == "token-1"
    assert "sent_at" in sent.data
    assert sent.data["notification_type"] == "document_published"

    [attempt] = DeliveryAttemptRepository(session).list()
    assert attempt.success is True
    assert attempt.token == "tok"
    assert attempt.metadata["link"] == MESSAGE.link


def test_recipient_without_token_is_skipped(caller) -> None:
    audit_log = RecordingAuditLog()
    transport = FakePushTransport()
    channel = PushChannel(transport, InMemoryRateLimiter(), audit_log, caller)

    outcome = channel.send(SubscriberRecipient(id=1, email="reader@company.com"), MESSAGE)

    assert outcome.status == OUTCOME_SKIPPED
    assert outcome.reason == SKIP_NO_PUSH_TOKEN
    assert transport.sent == []
    assert audit_log.attempts == []


def test_second_send_within_cooldown_is_rate_limited(caller) -> None:
    """Two pushes to one recipient inside the window produce one transport call."""

    audit_log = RecordingAuditLog()
    transport = FakePushTransport()
    channel = PushChannel(transport, InMemoryRateLimiter(), audit_log, caller, cooldown_seconds=15)
    recipient = _accounts(1)[0]

    first = channel.send(recipient, MESSAGE)
    second = channel.send(recipient, MESSAGE)

    assert first.status == OUTCOME_SENT
    assert second.status == OUTCOME_RATE_LIMITED
    assert len(transport.sent) == 1
    assert len(audit_log.attempts) == 1


def test_transport_failure_becomes_failed_outcome(caller) -> None:
    audit_log = RecordingAuditLog()
    transport = FakePushTransport(failing_tokens={"token-1"})
    channel = PushChannel(transport, InMemoryRateLimiter(), audit_log, caller)

    outcome = channel.send(_accounts(1)[0], MESSAGE)

    assert outcome.status == OUTCOME_FAILED
    assert "rejected" in outcome.error
    [attempt] = audit_log.attempts
    assert attempt.success is False
    assert attempt.error == outcome.error


def test_slow_transport_times_out(caller) -> None:
    class SlowTransport:
        def send_push(self, token, message):
            time.sleep(0.5)
            return "late"

    audit_log = RecordingAuditLog()
    channel = PushChannel(
        SlowTransport(), InMemoryRateLimiter(), audit_log, caller, timeout_seconds=0.05
    )

    outcome = channel.send(_accounts(1)[0], MESSAGE)

    assert outcome.status == OUTCOME_FAILED
    assert "timed out" in outcome.error
    assert audit_log.attempts[0].success is False


def test_send_many_isolates_failures(caller) -> None:
    """Two failing tokens out of five still deliver to the other three."""

    audit_log = RecordingAuditLog()
    transport = FakePushTransport(failing_tokens={"token-2", "token-4"})
    channel = PushChannel(transport, InMemoryRateLimiter(), audit_log, caller, concurrency=3)

    result = channel.send_many(_accounts(5), MESSAGE)

    assert (result.sent, result.failed, result.skipped) == (3, 2, 0)
    assert sorted(transport.tokens) == ["token-1", "token-3", "token-5"]
    assert len(audit_log.attempts) == 5
    assert sum(1 for attempt in audit_log.attempts if not attempt.success) == 2


def test_send_many_with_shared_database_limiter(session_factory, caller) -> None:
    transport = FakePushTransport()
    recipient = _accounts(1)[0]
    channel = PushChannel(
        transport, DatabaseRateLimiter(session_factory), RecordingAuditLog(), caller, concurrency=4
    )

    result = channel.send_many([recipient] * 4, MESSAGE)

    assert result.sent == 1
    assert result.skip_reasons == {"rate limited": 3}


def test_send_many_stops_submitting_after_shutdown(caller) -> None:
    stop_event = threading.Event()
    stop_event.set()
    transport = FakePushTransport()
    channel = PushChannel(
        transport, InMemoryRateLimiter(), RecordingAuditLog(), caller, stop_event=stop_event
    )

    result = channel.send_many(_accounts(3), MESSAGE)

    assert result.interrupted is True
    assert transport.sent == []
