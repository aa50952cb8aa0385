"""Timestamp conventions shared by the domain and the database layer.

Columns hold naive UTC values. Everything above the repositories works with
aware UTC datetimes; naive values coming from callers are read in the
configured ``APP_TIMEZONE``.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo

from notifier.config import get_settings


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the zone used to read naive inbound timestamps."""

    name = (get_settings().app_timezone or "").strip()
    return ZoneInfo(name) if name else timezone.utc


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Express ``value`` in UTC, reading a naive value in the app timezone."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_app_timezone())
    return value.astimezone(timezone.utc)


def to_db_datetime(value: datetime | None) -> datetime | None:
    """Return the naive UTC form stored in ``DateTime`` columns."""

    converted = as_utc(value)
    return converted.replace(tzinfo=None) if converted is not None else None


def from_db_datetime(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive value read back from a ``DateTime`` column."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def db_now() -> datetime:
    """Column default: the current time as naive UTC."""

    return utc_now().replace(tzinfo=None)


def transition_marker(value: datetime) -> datetime:
    """Canonical instant used in idempotency keys.

    The same moment always yields the same marker, whatever its offset, and
    sub-second digits are dropped because not every backend stores them.
    """

    return as_utc(value).replace(microsecond=0)
