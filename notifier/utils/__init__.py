"""Utility helpers for reusable functionality."""

from .datetime import (
    as_utc,
    db_now,
    from_db_datetime,
    get_app_timezone,
    to_db_datetime,
    transition_marker,
    utc_now,
)

__all__ = [
    "as_utc",
    "db_now",
    "from_db_datetime",
    "get_app_timezone",
    "to_db_datetime",
    "transition_marker",
    "utc_now",
]
