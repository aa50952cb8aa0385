"""Routes for announcements pushed to every registered device."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notifier.application.use_cases.notifications import (
    broadcast_notification as broadcast_notification_uc,
)
from notifier.container import DispatchService
from notifier.infrastructure.database import get_db
from notifier.interfaces.api.dependencies import get_dispatch_service
from notifier.interfaces.api.schemas import BroadcastCreate, BroadcastResult

router = APIRouter(prefix="/dispatch", tags=["dispatch"])


@router.post("/broadcast", response_model=BroadcastResult)
def broadcast(
    payload: BroadcastCreate,
    db: Session = Depends(get_db),
    service: DispatchService = Depends(get_dispatch_service),
) -> BroadcastResult:
    """Push ``title`` and ``body`` to every account with a push token."""

    result = broadcast_notification_uc(
        db,
        service.push_channel,
        title=payload.title,
        body=payload.body,
        base_url=service.settings.app_base_url,
        data=payload.data,
    )
    return BroadcastResult.from_batch(result)


__all__ = ["router"]
