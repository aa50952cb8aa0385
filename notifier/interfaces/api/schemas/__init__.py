"""Pydantic schemas used by the HTTP layer."""

from .delivery_attempt import ChannelSummary, DeliveryAttemptRead, DeliveryAttemptSummary
from .device import (
    DeviceTokenCheck,
    DeviceTokenRead,
    DeviceTokenRegister,
    DeviceTokenUnregister,
    DeviceTokenValidity,
)
from .dispatch_request import DispatchAccepted, DispatchRequestRead
from .event import DocumentPublishedEvent, DocumentSavedEvent, DocumentState
from .notification import BroadcastCreate, BroadcastResult, PushOutcomeRead

__all__ = [
    "BroadcastCreate",
    "BroadcastResult",
    "ChannelSummary",
    "DeliveryAttemptRead",
    "DeliveryAttemptSummary",
    "DeviceTokenCheck",
    "DeviceTokenRead",
    "DeviceTokenRegister",
    "DeviceTokenUnregister",
    "DeviceTokenValidity",
    "DispatchAccepted",
    "DispatchRequestRead",
    "DocumentPublishedEvent",
    "DocumentSavedEvent",
    "DocumentState",
    "PushOutcomeRead",
]
