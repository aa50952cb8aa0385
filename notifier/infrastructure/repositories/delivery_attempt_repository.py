"""Persistence layer for delivery attempt records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from notifier.domain.entities import DeliveryAttempt
from notifier.infrastructure.models import DeliveryAttemptModel
from notifier.utils import db_now, from_db_datetime, to_db_datetime


class DeliveryAttemptRepository:
    """Append and query :class:`DeliveryAttempt` entries.

    Rows are never updated or deleted; the repository intentionally offers
    no such operations.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, attempt: DeliveryAttempt) -> DeliveryAttempt:
        model = DeliveryAttemptModel()
        self._apply_entity_to_model(model, attempt)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, attempt_id: int) -> DeliveryAttempt | None:
        """Return a delivery attempt by its primary key, if present."""

        model = self.session.get(DeliveryAttemptModel, attempt_id)
        if model is None:
            return None
        return self._to_entity(model)

    def list(
        self,
        *,
        notification_type: str | None = None,
        channel: str | None = None,
        success: bool | None = None,
        dispatch_request_id: int | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        limit: int | None = 100,
    ) -> list[DeliveryAttempt]:
        """Return attempts, newest first, matching every provided filter."""

        query = self._filtered_query(
            notification_type=notification_type,
            channel=channel,
            success=success,
            dispatch_request_id=dispatch_request_id,
            created_from=created_from,
            created_to=created_to,
        )
        query = query.order_by(
            DeliveryAttemptModel.created_at.desc(), DeliveryAttemptModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        models: Iterable[DeliveryAttemptModel] = query.all()
        return [self._to_entity(model) for model in models]

    def summarize(
        self,
        *,
        notification_type: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> dict[str, dict[str, int]]:
        """Return ``{channel: {"total", "successful", "failed"}}`` counters."""

        successful = func.sum(case((DeliveryAttemptModel.success.is_(True), 1), else_=0))
        query = self.session.query(
            DeliveryAttemptModel.channel,
            func.count(DeliveryAttemptModel.id),
            successful,
        )
        query = self._apply_filters(
            query,
            notification_type=notification_type,
            created_from=created_from,
            created_to=created_to,
        ).group_by(DeliveryAttemptModel.channel)

        summary: dict[str, dict[str, int]] = {}
        for channel, total, ok in query.all():
            ok = int(ok or 0)
            summary[channel] = {"total": int(total), "successful": ok, "failed": int(total) - ok}
        return summary

    def _filtered_query(self, **filters: Any):
        return self._apply_filters(self.session.query(DeliveryAttemptModel), **filters)

    @staticmethod
    def _apply_filters(
        query,
        *,
        notification_type: str | None = None,
        channel: str | None = None,
        success: bool | None = None,
        dispatch_request_id: int | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ):
        if notification_type is not None:
            query = query.filter(DeliveryAttemptModel.notification_type == notification_type)
        if channel is not None:
            query = query.filter(DeliveryAttemptModel.channel == channel)
        if success is not None:
            query = query.filter(DeliveryAttemptModel.success.is_(success))
        if dispatch_request_id is not None:
            query = query.filter(DeliveryAttemptModel.dispatch_request_id == dispatch_request_id)
        if created_from is not None:
            query = query.filter(
                DeliveryAttemptModel.created_at >= to_db_datetime(created_from)
            )
        if created_to is not None:
            query = query.filter(
                DeliveryAttemptModel.created_at <= to_db_datetime(created_to)
            )
        return query

    @staticmethod
    def _to_entity(model: DeliveryAttemptModel) -> DeliveryAttempt:
        return DeliveryAttempt(
            id=model.id,
            channel=model.channel,
            notification_type=model.notification_type,
            title=model.title,
            body=model.body,
            success=bool(model.success),
            recipient_kind=model.recipient_kind,
            recipient_id=model.recipient_id,
            token=model.token,
            address=model.address,
            message_id=model.message_id,
            error=model.error,
            dispatch_request_id=model.dispatch_request_id,
            metadata=dict(model.details or {}),
            created_at=from_db_datetime(model.created_at),
        )

    @staticmethod
    def _apply_entity_to_model(model: DeliveryAttemptModel, attempt: DeliveryAttempt) -> None:
        model.dispatch_request_id = attempt.dispatch_request_id
        model.channel = attempt.channel
        model.notification_type = attempt.notification_type
        model.recipient_kind = attempt.recipient_kind
        model.recipient_id = attempt.recipient_id
        model.token = attempt.token
        model.address = attempt.address
        model.title = attempt.title
        model.body = attempt.body
        model.message_id = attempt.message_id
        model.success = attempt.success
        model.error = attempt.error
        model.details = dict(attempt.metadata or {})
        model.created_at = to_db_datetime(attempt.created_at) or db_now()


__all__ = ["DeliveryAttemptRepository"]
