"""Routes receiving document events from the content layer."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from notifier.application.dispatch import TransitionGuard
from notifier.application.use_cases.documents import (
    DocumentNotPublishedError,
    request_publish_notifications as request_publish_notifications_uc,
)
from notifier.domain.entities import DispatchRequest
from notifier.infrastructure.database import get_db
from notifier.interfaces.api.dependencies import get_transition_guard
from notifier.interfaces.api.schemas import (
    DispatchAccepted,
    DocumentPublishedEvent,
    DocumentSavedEvent,
)

router = APIRouter(prefix="/dispatch", tags=["dispatch"])


def _accepted(request: DispatchRequest | None) -> DispatchAccepted:
    if request is None:
        return DispatchAccepted(created=False)
    return DispatchAccepted(created=True, request_id=request.id, state=request.state)


@router.post(
    "/events/published",
    response_model=DispatchAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def document_published(
    payload: DocumentPublishedEvent,
    guard: TransitionGuard = Depends(get_transition_guard),
) -> DispatchAccepted:
    """Open the dispatch for a publication announced by the content layer."""

    return _accepted(guard.open(payload.to_event()))


@router.post(
    "/events/document-saved",
    response_model=DispatchAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def document_saved(
    payload: DocumentSavedEvent,
    guard: TransitionGuard = Depends(get_transition_guard),
) -> DispatchAccepted:
    """Inspect a document write and dispatch when it is a notifiable transition."""

    document, previous = payload.to_documents()
    return _accepted(guard.handle(document, previous))


@router.post(
    "/documents/{document_id}/publish-notifications",
    response_model=DispatchAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def publish_notifications(
    document_id: int,
    db: Session = Depends(get_db),
    guard: TransitionGuard = Depends(get_transition_guard),
) -> DispatchAccepted:
    """Dispatch notifications for a stored, published document."""

    try:
        request = request_publish_notifications_uc(db, guard, document_id)
    except DocumentNotPublishedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _accepted(request)


__all__ = ["router"]
