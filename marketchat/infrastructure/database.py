"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator
import logging
import uuid

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from marketchat.config import Settings, get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Return a new opaque primary key."""

    return uuid.uuid4().hex


def _engine_options(settings: Settings) -> dict[str, object]:
    options: dict[str, object] = {"pool_pre_ping": True}
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        # Route handlers run in the threadpool, so connections cross threads.
        options["connect_args"] = {"check_same_thread": False}
    return options


settings = get_settings()

engine = create_engine(settings.database_url, **_engine_options(settings))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database() -> None:
    """Ensure all ORM models have corresponding database tables."""

    from marketchat.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.debug("Database schema ensured on %s", engine.url.render_as_string())


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
    "engine",
    "generate_id",
    "get_db",
    "initialize_database",
]
