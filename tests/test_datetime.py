"""Tests for timestamp conversion at the storage boundary."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

import notifier.utils.datetime as datetime_utils
from notifier.utils import as_utc, from_db_datetime, to_db_datetime, transition_marker

LIMA = timezone(timedelta(hours=-5))


@pytest.fixture()
def lima_app_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(datetime_utils, "get_app_timezone", lambda: LIMA)


def test_naive_values_are_read_in_the_app_timezone(lima_app_timezone) -> None:
    assert as_utc(datetime(2024, 5, 1, 4, 30)) == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_columns_store_naive_utc(lima_app_timezone) -> None:
    aware = datetime(2024, 5, 1, 11, 30, tzinfo=timezone(timedelta(hours=2)))

    stored = to_db_datetime(aware)

    assert stored == datetime(2024, 5, 1, 9, 30)
    assert stored.tzinfo is None
    assert from_db_datetime(stored) == aware
    assert to_db_datetime(None) is None
    assert from_db_datetime(None) is None


def test_transition_marker_is_canonical(lima_app_timezone) -> None:
    instant = datetime(2024, 5, 1, 9, 30, 0, 999999, tzinfo=timezone.utc)
    forms = [
        instant,
        instant.astimezone(timezone(timedelta(hours=2))),
        instant.astimezone(LIMA).replace(tzinfo=None),
        instant.replace(microsecond=0),
    ]

    markers = {transition_marker(value) for value in forms}

    assert markers == {datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)}
