"""Domain entities exposed by the application."""

from .delivery_attempt import (
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    NOTIFICATION_BROADCAST,
    NOTIFICATION_DOCUMENT_PUBLISHED,
    NOTIFICATION_DOCUMENT_UPDATED,
    NOTIFICATION_TEST,
    DeliveryAttempt,
)
from .delivery_result import (
    OUTCOME_FAILED,
    OUTCOME_RATE_LIMITED,
    OUTCOME_SENT,
    OUTCOME_SKIPPED,
    SKIP_DISALLOWED_DOMAIN,
    SKIP_INVALID_ADDRESS,
    SKIP_MISSING_ADDRESS,
    SKIP_NO_PUSH_TOKEN,
    SKIP_RATE_LIMITED,
    BatchResult,
    DeliveryOutcome,
)
from .dispatch_request import (
    DISPATCH_STATE_COMPLETED,
    DISPATCH_STATE_DELIVERING,
    DISPATCH_STATE_FAILED,
    DISPATCH_STATE_PENDING,
    DISPATCH_STATE_RESOLVING,
    DISPATCH_STATES,
    TRIGGER_CONTENT_UPDATED,
    TRIGGER_PUBLISHED,
    UNFINISHED_DISPATCH_STATES,
    DispatchRequest,
    build_idempotency_key,
)
from .document import Document, DocumentPublished
from .recipient import (
    RECIPIENT_ACCOUNT,
    RECIPIENT_SUBSCRIBER,
    AccountRecipient,
    Recipient,
    SubscriberRecipient,
)

__all__ = [
    "AccountRecipient",
    "BatchResult",
    "CHANNEL_EMAIL",
    "CHANNEL_PUSH",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DISPATCH_STATE_COMPLETED",
    "DISPATCH_STATE_DELIVERING",
    "DISPATCH_STATE_FAILED",
    "DISPATCH_STATE_PENDING",
    "DISPATCH_STATE_RESOLVING",
    "DISPATCH_STATES",
    "DispatchRequest",
    "Document",
    "DocumentPublished",
    "NOTIFICATION_DOCUMENT_PUBLISHED",
    "NOTIFICATION_DOCUMENT_UPDATED",
    "NOTIFICATION_BROADCAST",
    "NOTIFICATION_TEST",
    "OUTCOME_FAILED",
    "OUTCOME_RATE_LIMITED",
    "OUTCOME_SENT",
    "OUTCOME_SKIPPED",
    "RECIPIENT_ACCOUNT",
    "RECIPIENT_SUBSCRIBER",
    "Recipient",
    "SKIP_DISALLOWED_DOMAIN",
    "SKIP_INVALID_ADDRESS",
    "SKIP_MISSING_ADDRESS",
    "SKIP_NO_PUSH_TOKEN",
    "SKIP_RATE_LIMITED",
    "SubscriberRecipient",
    "TRIGGER_CONTENT_UPDATED",
    "TRIGGER_PUBLISHED",
    "UNFINISHED_DISPATCH_STATES",
    "build_idempotency_key",
]
