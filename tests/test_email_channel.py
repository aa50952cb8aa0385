"""Tests for the batched email channel."""

from __future__ import annotations

import threading

import pytest

from notifier.application.dispatch.audit import DeliveryAuditLog
from notifier.application.dispatch.email_channel import EmailChannel, chunked
from notifier.application.dispatch.messages import build_mail_message
from notifier.application.dispatch.timeouts import BoundedCaller
from notifier.application.dispatch.validators import EmailAddressPolicy
from notifier.config import DEFAULT_DISALLOWED_EMAIL_DOMAIN_FRAGMENTS, DEFAULT_DISALLOWED_EMAIL_DOMAINS
from notifier.domain.entities import (
    SKIP_DISALLOWED_DOMAIN,
    TRIGGER_PUBLISHED,
    AccountRecipient,
    DispatchRequest,
    SubscriberRecipient,
)
from notifier.infrastructure.email import render_document_published_email
from notifier.infrastructure.repositories import DeliveryAttemptRepository, RecipientRepository
from tests.conftest import FakeMailTransport, add_subscriber

MESSAGE = render_document_published_email(
    title="Report", body="Results", link="https://docs.local/documents/1"
)
POLICY = EmailAddressPolicy(
    DEFAULT_DISALLOWED_EMAIL_DOMAINS, DEFAULT_DISALLOWED_EMAIL_DOMAIN_FRAGMENTS
)


@pytest.fixture()
def caller():
    caller = BoundedCaller(2)
    yield caller
    caller.shutdown()


def _channel(transport, session_factory, caller, **kwargs) -> EmailChannel:
    return EmailChannel(
        transport,
        DeliveryAuditLog(session_factory),
        caller,
        session_factory,
        policy=POLICY,
        **kwargs,
    )


def test_chunked_splits_into_fixed_batches() -> None:
    batches = list(chunked(list(range(23)), 10))

    assert [len(batch) for batch in batches] == [10, 10, 3]


def test_send_batch_counts_each_outcome(session_factory, session, caller) -> None:
    transport = FakeMailTransport(failing_addresses={"bounce@company.com"})
    channel = _channel(transport, session_factory, caller)
    recipients = [
        AccountRecipient(id=1, name="Ana", email="ana@company.com"),
        AccountRecipient(id=2, name="Bo", email="bounce@company.com"),
        SubscriberRecipient(id=None, email="qa@example.org"),
    ]

    result = channel.send_batch(recipients, MESSAGE, notification_type="document_published")

    assert (result.sent, result.failed, result.skipped) == (1, 1, 1)
    assert result.skip_reasons == {SKIP_DISALLOWED_DOMAIN: 1}
    assert transport.addresses == ["ana@company.com"]

    attempts = DeliveryAttemptRepository(session).list()
    assert len(attempts) == 2
    assert {attempt.success for attempt in attempts} == {True, False}
    assert all(attempt.title == MESSAGE.subject for attempt in attempts)


def test_last_notified_at_updated_only_for_delivered_subscribers(
    session_factory, session, caller
) -> None:
    delivered = add_subscriber(session, email="reader@company.com")
    bounced = add_subscriber(session, email="bounce@company.com")
    transport = FakeMailTransport(failing_addresses={"bounce@company.com"})
    channel = _channel(transport, session_factory, caller)

    channel.send_batch(
        [
            SubscriberRecipient(id=delivered.id, email=delivered.email),
            SubscriberRecipient(id=bounced.id, email=bounced.email),
        ],
        MESSAGE,
        notification_type="document_published",
    )

    session.expire_all()
    repository = RecipientRepository(session)
    assert repository.get_subscriber(delivered.id).last_notified_at is not None
    assert repository.get_subscriber(bounced.id).last_notified_at is None


def test_batches_continue_after_failures(session_factory, caller) -> None:
    addresses = [f"reader{index}@company.com" for index in range(25)]
    transport = FakeMailTransport(failing_addresses={addresses[3], addresses[17]})
    channel = _channel(transport, session_factory, caller, batch_size=10)

    result = channel.send_batch(
        [AccountRecipient(id=index, name="", email=address) for index, address in enumerate(addresses)],
        MESSAGE,
        notification_type="document_published",
    )

    assert result.sent == 23
    assert result.failed == 2


def test_shutdown_prevents_new_batches(session_factory, caller) -> None:
    stop_event = threading.Event()
    sent_before_stop = 0

    class StoppingTransport(FakeMailTransport):
        def send_mail(self, address, message):
            nonlocal sent_before_stop
            message_id = super().send_mail(address, message)
            sent_before_stop += 1
            if sent_before_stop == 2:
                stop_event.set()
            return message_id

    transport = StoppingTransport()
    channel = _channel(transport, session_factory, caller, batch_size=3, stop_event=stop_event)
    recipients = [
        AccountRecipient(id=index, name="", email=f"reader{index}@company.com") for index in range(9)
    ]

    result = channel.send_batch(recipients, MESSAGE, notification_type="document_published")

    assert result.interrupted is True
    assert result.sent == 3


def test_unexpected_error_for_one_recipient_does_not_stop_the_batch(
    session_factory, caller
) -> None:
    class BrokenPolicy(EmailAddressPolicy):
        def rejection_reason(self, address):
            if address == "broken@company.com":
                raise RuntimeError("policy lookup failed")
            return super().rejection_reason(address)

    transport = FakeMailTransport()
    channel = EmailChannel(
        transport,
        DeliveryAuditLog(session_factory),
        caller,
        session_factory,
        policy=BrokenPolicy(DEFAULT_DISALLOWED_EMAIL_DOMAINS),
        batch_size=2,
    )
    recipients = [
        AccountRecipient(id=1, name="", email="first@company.com"),
        AccountRecipient(id=2, name="", email="broken@company.com"),
        AccountRecipient(id=3, name="", email="third@company.com"),
    ]

    result = channel.send_batch(recipients, MESSAGE, notification_type="document_published")

    assert (result.sent, result.failed) == (2, 1)
    assert transport.addresses == ["first@company.com", "third@company.com"]


def test_audit_body_is_the_plain_excerpt(session_factory, session, caller) -> None:
    request = DispatchRequest(
        id=None,
        idempotency_key="1:published:-",
        document_id=1,
        trigger=TRIGGER_PUBLISHED,
        title="Report",
        body="<p>Revenue grew <b>12%</b></p>",
        published_at=None,
    )
    message = build_mail_message(request, base_url="https://docs.local")
    channel = _channel(FakeMailTransport(), session_factory, caller)

    channel.send_batch(
        [AccountRecipient(id=1, name="Ana", email="ana@company.com")],
        message,
        notification_type="document_published",
    )

    [attempt] = DeliveryAttemptRepository(session).list()
    assert attempt.body == "Revenue grew 12%"
    assert "<p>" in message.html_content
