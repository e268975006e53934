"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from notification_hub.config import Settings, get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the configured database."""

    connect_args: dict[str, object] = {}
    if settings.database_url.startswith("sqlite"):
        # Push fan-out runs off the request thread and opens its own sessions.
        connect_args["check_same_thread"] = False
    return create_engine(
        settings.database_url, pool_pre_ping=True, connect_args=connect_args
    )


settings = get_settings()
engine = build_engine(settings)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notification_hub.infrastructure import models  # noqa: F401  # ensure models are imported

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target, checkfirst=True)
    logger.debug("Database schema ensured on %s", target.url)


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
    "engine",
    "get_db",
    "initialize_database",
]
