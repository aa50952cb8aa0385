"""Shared fixtures for the notifier test-suite."""

from __future__ import annotations

import os
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

from notifier.config import Settings
from notifier.domain.exceptions import MailDeliveryError, PushDeliveryError
from notifier.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from notifier.infrastructure.email import MailMessage
from notifier.infrastructure.models import (
    AccountModel,
    DocumentModel,
    SubscriberModel,
)
from notifier.infrastructure.push import PushMessage

PUBLISHED_AT = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


class FakePushTransport:
    """Record pushes and fail for the tokens listed in ``failing_tokens``."""

    def __init__(self, failing_tokens: set[str] | None = None) -> None:
        self.failing_tokens = set(failing_tokens or ())
        self.sent: list[tuple[str, PushMessage]] = []
        self._lock = threading.Lock()

    def send_push(self, token: str, message: PushMessage) -> str:
        if token in self.failing_tokens:
            raise PushDeliveryError(f"Token {token} rejected", status_code=404)
        with self._lock:
            self.sent.append((token, message))
            return f"msg-{len(self.sent)}"

    @property
    def tokens(self) -> list[str]:
        return [token for token, _ in self.sent]


class FakeMailTransport:
    """Record emails and fail for the addresses listed in ``failing_addresses``."""

    def __init__(self, failing_addresses: set[str] | None = None) -> None:
        self.failing_addresses = set(failing_addresses or ())
        self.sent: list[tuple[str, MailMessage]] = []
        self._lock = threading.Lock()

    def send_mail(self, address: str, message: MailMessage) -> str | None:
        if address in self.failing_addresses:
            raise MailDeliveryError("Mailbox unavailable", status_code=550)
        with self._lock:
            self.sent.append((address, message))
            return f"mail-{len(self.sent)}"

    @property
    def addresses(self) -> list[str]:
        return [address for address, _ in self.sent]


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'notifier.db'}"


@pytest.fixture()
def engine(database_url: str):
    engine = build_engine(database_url)
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def settings(database_url: str) -> Settings:
    return Settings(
        database_url=database_url,
        app_timezone="UTC",
        app_base_url="https://docs.local",
        push_concurrency=2,
        dispatch_workers=2,
        dispatch_backoff_seconds=[1, 2, 3],
    )


@pytest.fixture()
def push_transport() -> FakePushTransport:
    return FakePushTransport()


@pytest.fixture()
def mail_transport() -> FakeMailTransport:
    return FakeMailTransport()


def add_account(session, *, name: str, email: str | None = None, push_token: str | None = None,
                is_active: bool = True) -> AccountModel:
    model = AccountModel(name=name, email=email, push_token=push_token, is_active=is_active)
    session.add(model)
    session.commit()
    session.refresh(model)
    return model


def add_subscriber(session, *, email: str, is_active: bool = True) -> SubscriberModel:
    model = SubscriberModel(email=email, is_active=is_active)
    session.add(model)
    session.commit()
    session.refresh(model)
    return model


def add_document(session, *, title: str = "Quarterly report", body: str = "<p>Results</p>",
                 is_published: bool = True,
                 published_at: datetime | None = PUBLISHED_AT) -> DocumentModel:
    model = DocumentModel(
        title=title,
        body=body,
        is_published=is_published,
        published_at=published_at.replace(tzinfo=None) if published_at else None,
    )
    session.add(model)
    session.commit()
    session.refresh(model)
    return model
