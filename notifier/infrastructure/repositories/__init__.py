"""Repository implementations for infrastructure layer."""

from .delivery_attempt_repository import DeliveryAttemptRepository
from .dispatch_request_repository import DispatchRequestRepository
from .document_repository import DocumentRepository
from .rate_limit_repository import RateLimitRepository
from .recipient_repository import RecipientRepository

__all__ = [
    "DeliveryAttemptRepository",
    "DispatchRequestRepository",
    "DocumentRepository",
    "RateLimitRepository",
    "RecipientRepository",
]
