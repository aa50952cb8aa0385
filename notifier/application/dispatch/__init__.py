"""Notification fan-out engine for published documents."""

from .audit import DeliveryAuditLog, redact_token
from .coordinator import DispatchCoordinator, DispatchResult
from .email_channel import EmailChannel
from .guard import TransitionGuard
from .push_channel import PushChannel
from .recipients import RecipientResolver, ResolvedRecipients
from .timeouts import BoundedCaller
from .validators import EmailAddressPolicy
from .worker import DispatchWorkerPool

__all__ = [
    "BoundedCaller",
    "DeliveryAuditLog",
    "DispatchCoordinator",
    "DispatchResult",
    "DispatchWorkerPool",
    "EmailAddressPolicy",
    "EmailChannel",
    "PushChannel",
    "RecipientResolver",
    "ResolvedRecipients",
    "TransitionGuard",
    "redact_token",
]
