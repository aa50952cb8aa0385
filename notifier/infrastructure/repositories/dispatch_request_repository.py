"""Persistence helpers for dispatch requests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notifier.domain.entities import (
    DISPATCH_STATE_PENDING,
    DISPATCH_STATE_RESOLVING,
    UNFINISHED_DISPATCH_STATES,
    DispatchRequest,
)
from notifier.infrastructure.models import DispatchRequestModel
from notifier.utils import db_now, from_db_datetime, to_db_datetime

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = {"next_attempt_at", "completed_at", "transition_at", "published_at"}


class DispatchRequestRepository:
    """Provide the guarded creation and state transitions of dispatch requests."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_if_absent(self, request: DispatchRequest) -> DispatchRequest | None:
        """Insert ``request`` unless its idempotency key already exists.

        Returns the stored request, or ``None`` when another writer already
        created a request for the same key.
        """

        model = DispatchRequestModel()
        self._apply_entity_to_model(model, request)
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info(
                "Dispatch request %s already exists; skipping creation",
                request.idempotency_key,
            )
            return None
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, request_id: int) -> DispatchRequest | None:
        model = self.session.get(DispatchRequestModel, request_id)
        return self._to_entity(model) if model else None

    def list(self, *, state: str | None = None, limit: int | None = 100) -> Sequence[DispatchRequest]:
        query = self.session.query(DispatchRequestModel)
        if state is not None:
            query = query.filter(DispatchRequestModel.state == state)
        query = query.order_by(DispatchRequestModel.created_at.desc(), DispatchRequestModel.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_ids(self, *, state: str) -> list[int]:
        rows = (
            self.session.query(DispatchRequestModel.id)
            .filter(DispatchRequestModel.state == state)
            .order_by(DispatchRequestModel.id)
            .all()
        )
        return [row[0] for row in rows]

    def claim(
        self,
        request_id: int,
        *,
        from_states: Sequence[str] = (DISPATCH_STATE_PENDING,),
    ) -> DispatchRequest | None:
        """Atomically move the request into ``resolving`` and count the attempt.

        Returns ``None`` when the request is not in one of ``from_states``
        (for instance because another worker already claimed it).
        """

        updated = (
            self.session.query(DispatchRequestModel)
            .filter(DispatchRequestModel.id == request_id)
            .filter(DispatchRequestModel.state.in_(list(from_states)))
            .update(
                {
                    DispatchRequestModel.state: DISPATCH_STATE_RESOLVING,
                    DispatchRequestModel.attempts: DispatchRequestModel.attempts + 1,
                    DispatchRequestModel.next_attempt_at: None,
                    DispatchRequestModel.updated_at: db_now(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        if updated != 1:
            return None
        self.session.expire_all()
        return self.get(request_id)

    def transition(self, request_id: int, state: str, **changes: Any) -> DispatchRequest:
        """Set ``state`` (and any extra column ``changes``) on the request."""

        model = self.session.get(DispatchRequestModel, request_id)
        if model is None:
            msg = f"Dispatch request with id {request_id} not found"
            raise ValueError(msg)
        model.state = state
        for name, value in changes.items():
            if name in _DATETIME_FIELDS:
                value = to_db_datetime(value)
            setattr(model, name, value)
        model.updated_at = db_now()
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def reset_unfinished(self) -> list[int]:
        """Return interrupted requests to ``pending`` and report their ids."""

        models = (
            self.session.query(DispatchRequestModel)
            .filter(DispatchRequestModel.state.in_(list(UNFINISHED_DISPATCH_STATES)))
            .order_by(DispatchRequestModel.id)
            .all()
        )
        now = db_now()
        for model in models:
            model.state = DISPATCH_STATE_PENDING
            model.updated_at = now
        self.session.commit()
        return [model.id for model in models]

    @staticmethod
    def _to_entity(model: DispatchRequestModel) -> DispatchRequest:
        return DispatchRequest(
            id=model.id,
            idempotency_key=model.idempotency_key,
            document_id=model.document_id,
            trigger=model.trigger,
            title=model.title or "",
            body=model.body or "",
            published_at=from_db_datetime(model.published_at),
            transition_at=from_db_datetime(model.transition_at),
            state=model.state,
            attempts=model.attempts or 0,
            last_error=model.last_error,
            summary=dict(model.summary or {}),
            next_attempt_at=from_db_datetime(model.next_attempt_at),
            created_at=from_db_datetime(model.created_at),
            updated_at=from_db_datetime(model.updated_at),
            completed_at=from_db_datetime(model.completed_at),
        )

    @staticmethod
    def _apply_entity_to_model(model: DispatchRequestModel, request: DispatchRequest) -> None:
        model.idempotency_key = request.idempotency_key
        model.document_id = request.document_id
        model.trigger = request.trigger
        model.transition_at = to_db_datetime(request.transition_at)
        model.title = request.title
        model.body = request.body
        model.published_at = to_db_datetime(request.published_at)
        model.state = request.state
        model.attempts = request.attempts
        model.last_error = request.last_error
        model.summary = dict(request.summary or {})
        model.next_attempt_at = to_db_datetime(request.next_attempt_at)
        model.created_at = to_db_datetime(request.created_at) or db_now()
        model.completed_at = to_db_datetime(request.completed_at)


__all__ = ["DispatchRequestRepository"]
