"""Persistence helpers for notification recipients."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from notifier.domain.entities import AccountRecipient, SubscriberRecipient
from notifier.infrastructure.models import AccountModel, SubscriberModel
from notifier.utils import from_db_datetime, to_db_datetime


class RecipientRepository:
    """Read accounts and subscribers; write only delivery bookkeeping."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_push_capable_accounts(self) -> Sequence[AccountRecipient]:
        query = (
            self.session.query(AccountModel)
            .filter(AccountModel.push_token.is_not(None))
            .filter(AccountModel.push_token != "")
            .order_by(AccountModel.id)
        )
        return [self._account_to_entity(model) for model in query.all()]

    def list_accounts_with_email(self) -> Sequence[AccountRecipient]:
        query = (
            self.session.query(AccountModel)
            .filter(AccountModel.email.is_not(None))
            .filter(func.trim(AccountModel.email) != "")
            .order_by(AccountModel.id)
        )
        return [self._account_to_entity(model) for model in query.all()]

    def list_active_subscribers(self) -> Sequence[SubscriberRecipient]:
        query = (
            self.session.query(SubscriberModel)
            .filter(SubscriberModel.is_active.is_(True))
            .order_by(SubscriberModel.id)
        )
        return [self._subscriber_to_entity(model) for model in query.all()]

    def get_account(self, account_id: int) -> AccountRecipient | None:
        model = self.session.get(AccountModel, account_id)
        return self._account_to_entity(model) if model else None

    def get_subscriber(self, subscriber_id: int) -> SubscriberRecipient | None:
        model = self.session.get(SubscriberModel, subscriber_id)
        return self._subscriber_to_entity(model) if model else None

    def touch_last_notified(self, subscriber_id: int, notified_at: datetime) -> bool:
        """Record ``notified_at`` on the subscriber; ``False`` if it no longer exists."""

        updated = (
            self.session.query(SubscriberModel)
            .filter(SubscriberModel.id == subscriber_id)
            .update(
                {SubscriberModel.last_notified_at: to_db_datetime(notified_at)},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def set_push_token(self, account_id: int, token: str) -> AccountRecipient:
        """Attach ``token`` to the account, detaching it from any other holder."""

        model = self.session.get(AccountModel, account_id)
        if model is None:
            msg = f"Account with id {account_id} not found"
            raise ValueError(msg)

        self.session.query(AccountModel).filter(
            AccountModel.push_token == token,
            AccountModel.id != account_id,
        ).update({AccountModel.push_token: None}, synchronize_session=False)
        model.push_token = token
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._account_to_entity(model)

    def clear_push_token(self, account_id: int, *, token: str | None = None) -> bool:
        """Remove the account token; when ``token`` is given it must match."""

        query = self.session.query(AccountModel).filter(AccountModel.id == account_id)
        if token is not None:
            query = query.filter(AccountModel.push_token == token)
        updated = query.update({AccountModel.push_token: None}, synchronize_session=False)
        self.session.commit()
        return bool(updated)

    @staticmethod
    def _account_to_entity(model: AccountModel) -> AccountRecipient:
        return AccountRecipient(
            id=model.id,
            name=model.name or "",
            email=model.email,
            push_token=model.push_token,
            is_active=bool(model.is_active),
        )

    @staticmethod
    def _subscriber_to_entity(model: SubscriberModel) -> SubscriberRecipient:
        return SubscriberRecipient(
            id=model.id,
            email=model.email,
            is_active=bool(model.is_active),
            last_notified_at=from_db_datetime(model.last_notified_at),
        )


__all__ = ["RecipientRepository"]
