"""Schemas for push token registration."""

from pydantic import BaseModel, Field


class DeviceTokenRegister(BaseModel):
    """Payload attaching a push token to an account."""

    account_id: int = Field(..., gt=0)
    token: str = Field(..., min_length=1, max_length=512)


class DeviceTokenUnregister(BaseModel):
    """Payload detaching the push token of an account."""

    account_id: int = Field(..., gt=0)
    token: str | None = Field(default=None, max_length=512)


class DeviceTokenRead(BaseModel):
    account_id: int
    has_push_token: bool


class DeviceTokenCheck(BaseModel):
    token: str = Field(..., min_length=1, max_length=512)


class DeviceTokenValidity(BaseModel):
    valid: bool
    detail: str


__all__ = [
    "DeviceTokenCheck",
    "DeviceTokenRead",
    "DeviceTokenRegister",
    "DeviceTokenUnregister",
    "DeviceTokenValidity",
]
