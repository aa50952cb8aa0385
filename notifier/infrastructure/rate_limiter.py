"""Shared cooldown stores used to throttle push notifications."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Protocol

from sqlalchemy.orm import Session

from notifier.infrastructure.repositories import RateLimitRepository
from notifier.utils import utc_now

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    """Atomic check-and-set of a key for ``ttl_seconds``."""

    def try_acquire(self, key: str, ttl_seconds: float) -> bool:
        """Return ``True`` when the caller may proceed, ``False`` while cooling down."""

    def purge_expired(self) -> int:
        """Drop expired keys and return how many were removed."""


class DatabaseRateLimiter:
    """Rate limiter backed by the ``rate_limit_entry`` table.

    Safe to share between worker threads and processes: uniqueness of the
    key column decides which concurrent caller wins.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def try_acquire(self, key: str, ttl_seconds: float) -> bool:
        now = utc_now()
        session = self._session_factory()
        try:
            acquired = RateLimitRepository(session).try_insert(
                key, expires_at=now + timedelta(seconds=ttl_seconds), now=now
            )
        finally:
            session.close()
        if not acquired:
            logger.debug("Rate limit key %s is cooling down", key)
        return acquired

    def purge_expired(self) -> int:
        session = self._session_factory()
        try:
            return RateLimitRepository(session).purge_expired(utc_now())
        finally:
            session.close()


class InMemoryRateLimiter:
    """Process-local rate limiter for single-process deployments and tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._expiries: dict[str, float] = {}
        self._lock = threading.Lock()

    def try_acquire(self, key: str, ttl_seconds: float) -> bool:
        with self._lock:
            now = self._clock()
            expires_at = self._expiries.get(key)
            if expires_at is not None and expires_at > now:
                return False
            self._expiries[key] = now + ttl_seconds
            return True

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, expiry in self._expiries.items() if expiry <= now]
            for key in expired:
                del self._expiries[key]
            return len(expired)


__all__ = ["RateLimiter", "DatabaseRateLimiter", "InMemoryRateLimiter"]
