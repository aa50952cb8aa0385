"""Routes for registering account push tokens."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from notifier.application.dispatch.validators import is_well_formed_push_token
from notifier.application.use_cases.devices import (
    register_device_token as register_device_token_uc,
    unregister_device_token as unregister_device_token_uc,
)
from notifier.application.use_cases.notifications import (
    MissingPushTokenError,
    send_test_notification as send_test_notification_uc,
)
from notifier.container import DispatchService
from notifier.infrastructure.database import get_db
from notifier.interfaces.api.dependencies import get_dispatch_service
from notifier.interfaces.api.schemas import (
    DeviceTokenCheck,
    DeviceTokenRead,
    DeviceTokenRegister,
    DeviceTokenUnregister,
    DeviceTokenValidity,
    PushOutcomeRead,
)

router = APIRouter(prefix="/devices", tags=["devices"])


@router.post("/register", response_model=DeviceTokenRead)
def register_device(
    payload: DeviceTokenRegister,
    db: Session = Depends(get_db),
) -> DeviceTokenRead:
    """Attach a push token to an account."""

    try:
        account = register_device_token_uc(db, payload.account_id, payload.token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return DeviceTokenRead(account_id=account.id, has_push_token=account.has_push_token())


@router.post("/unregister", status_code=status.HTTP_204_NO_CONTENT)
def unregister_device(
    payload: DeviceTokenUnregister,
    db: Session = Depends(get_db),
) -> Response:
    """Detach the push token of an account."""

    try:
        unregister_device_token_uc(db, payload.account_id, payload.token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/validate-token", response_model=DeviceTokenValidity)
def validate_device_token(payload: DeviceTokenCheck) -> DeviceTokenValidity:
    if is_well_formed_push_token(payload.token):
        return DeviceTokenValidity(valid=True, detail="Token appears to be valid")
    return DeviceTokenValidity(valid=False, detail="Token format is invalid")


@router.post("/{account_id}/test-notification", response_model=PushOutcomeRead)
def send_test_notification(
    account_id: int,
    db: Session = Depends(get_db),
    service: DispatchService = Depends(get_dispatch_service),
) -> PushOutcomeRead:
    """Send a test push to the device registered for an account."""

    try:
        outcome = send_test_notification_uc(
            db, service.push_channel, account_id, base_url=service.settings.app_base_url
        )
    except MissingPushTokenError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return PushOutcomeRead.from_outcome(outcome)


__all__ = ["router"]
