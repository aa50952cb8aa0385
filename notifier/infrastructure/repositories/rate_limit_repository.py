"""Persistence helpers for push cooldown entries."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notifier.infrastructure.models import RateLimitEntryModel
from notifier.utils import to_db_datetime


class RateLimitRepository:
    """Insert-if-absent storage of expiring keys."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def try_insert(self, key: str, *, expires_at: datetime, now: datetime) -> bool:
        """Store ``key`` unless an unexpired entry already holds it.

        Expired entries for the key are removed in the same transaction, the
        primary key makes concurrent inserts for one key mutually exclusive.
        """

        naive_now = to_db_datetime(now)
        self.session.query(RateLimitEntryModel).filter(
            RateLimitEntryModel.key == key,
            RateLimitEntryModel.expires_at <= naive_now,
        ).delete(synchronize_session=False)
        self.session.add(
            RateLimitEntryModel(key=key, expires_at=to_db_datetime(expires_at))
        )
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def purge_expired(self, now: datetime) -> int:
        removed = (
            self.session.query(RateLimitEntryModel)
            .filter(RateLimitEntryModel.expires_at <= to_db_datetime(now))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return int(removed or 0)


__all__ = ["RateLimitRepository"]
