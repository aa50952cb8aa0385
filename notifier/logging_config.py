"""Logging setup for the notification service."""

from __future__ import annotations

import logging
import logging.config
import re

EMAIL_PATTERN = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")


class RedactEmailFilter(logging.Filter):
    """Mask the local part of email addresses found in log records."""

    def _sanitize(self, value: object) -> object:
        if not isinstance(value, str):
            return value
        return EMAIL_PATTERN.sub(r"\1***@\2", value)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(item) for item in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._sanitize(value) for key, value in record.args.items()}

        return True


def setup_logging(level: str = "INFO") -> None:
    """Install console logging with address redaction."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "redact_email": {
                    "()": "notifier.logging_config.RedactEmailFilter",
                }
            },
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["redact_email"],
                }
            },
            "loggers": {
                "": {
                    "handlers": ["console"],
                    "level": level.upper(),
                },
                "uvicorn.access": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
                "httpx": {"level": "WARNING"},
            },
        }
    )


__all__ = ["RedactEmailFilter", "setup_logging"]
