"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from notifier.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine suitable for use from several worker threads."""

    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(bind: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``bind``."""

    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


settings = get_settings()
engine = build_engine(settings.database_url)
SessionLocal = build_session_factory(engine)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notifier.infrastructure import models  # noqa: F401  # ensure models are imported

    target = bind or engine
    Base.metadata.create_all(bind=target, checkfirst=True)
    logger.debug("Database schema ensured for %s", target.url.render_as_string(hide_password=True))


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "build_session_factory",
    "engine",
    "get_db",
    "initialize_database",
]
