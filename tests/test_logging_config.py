"""Tests for the logging setup."""

from __future__ import annotations

import logging

from notifier.logging_config import RedactEmailFilter


def _record(msg, *args) -> logging.LogRecord:
    return logging.LogRecord("notifier", logging.INFO, __file__, 1, msg, args, None)


def test_filter_masks_addresses_in_message_and_args() -> None:
    record = _record("Failed to send email to %s", "reader@company.com")

    assert RedactEmailFilter().filter(record) is True
    assert record.getMessage() == "Failed to send email to r***@company.com"


def test_filter_leaves_other_arguments_untouched() -> None:
    record = _record("Dispatch request %s completed in %d attempts", 12, 2)

    RedactEmailFilter().filter(record)

    assert record.getMessage() == "Dispatch request 12 completed in 2 attempts"
