"""Exceptions raised by the notification dispatch core."""

from __future__ import annotations


class NotifierError(Exception):
    """Base class for errors raised by the dispatch core."""


class DeliveryError(NotifierError):
    """A single delivery to a single recipient could not be completed."""


class PushDeliveryError(DeliveryError):
    """The push transport rejected or failed to deliver a message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MailDeliveryError(DeliveryError):
    """The mail transport rejected or failed to deliver a message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeliveryTimeout(DeliveryError):
    """An external delivery call exceeded its time budget."""


class InvalidDocumentSnapshot(NotifierError):
    """The document captured for a dispatch lacks the fields needed to notify."""


def describe_exception(exc: BaseException) -> str:
    """Return the message of ``exc`` or its class name when it has none."""

    text = str(exc)
    return text if text else exc.__class__.__name__


__all__ = [
    "NotifierError",
    "DeliveryError",
    "PushDeliveryError",
    "MailDeliveryError",
    "DeliveryTimeout",
    "InvalidDocumentSnapshot",
    "describe_exception",
]
