"""Tests for application settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from notifier.config import Settings, get_settings, reset_settings_cache


def test_defaults() -> None:
    settings = Settings(database_url="sqlite://")

    assert settings.push_cooldown_seconds == 15
    assert settings.email_batch_size == 10
    assert settings.dispatch_max_attempts == 3
    assert settings.dispatch_backoff_seconds == [10, 60, 120]
    assert "example.com" in settings.disallowed_email_domains
    assert settings.renotify_on_content_update is False


def test_backoff_is_clamped_to_the_last_delay() -> None:
    settings = Settings(database_url="sqlite://")

    assert [settings.backoff_for_attempt(attempt) for attempt in (1, 2, 3, 7)] == [10, 60, 120, 120]


def test_sendgrid_settings_must_be_paired() -> None:
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite://", sendgrid_api_key="SG.fake")

    settings = Settings(
        database_url="sqlite://",
        sendgrid_api_key="SG.fake",
        sendgrid_sender="news@company.com",
    )
    assert settings.sendgrid_sender == "news@company.com"


def test_settings_are_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PUSH_COOLDOWN_SECONDS", "30")
    monkeypatch.setenv("DISPATCH_BACKOFF_SECONDS", "[5, 15]")
    reset_settings_cache()
    try:
        settings = get_settings()
        assert settings.push_cooldown_seconds == 30
        assert settings.dispatch_backoff_seconds == [5, 15]
    finally:
        monkeypatch.undo()
        reset_settings_cache()


def test_app_timezone_must_be_a_known_zone() -> None:
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite://", app_timezone="Mars/Olympus_Mons")

    assert Settings(database_url="sqlite://", app_timezone="  ").app_timezone is None
