"""ORM models used by the application infrastructure."""

from .account import AccountModel
from .delivery_attempt import DeliveryAttemptModel
from .dispatch_request import DispatchRequestModel
from .document import DocumentModel
from .rate_limit import RateLimitEntryModel
from .subscriber import SubscriberModel

__all__ = [
    "AccountModel",
    "DeliveryAttemptModel",
    "DispatchRequestModel",
    "DocumentModel",
    "RateLimitEntryModel",
    "SubscriberModel",
]
