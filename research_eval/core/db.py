# research_eval/core/db.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from research_eval.core.errors import StorageError
from research_eval.core.settings import settings

# Import the models so they register on the metadata
from research_eval.models import db_models  # noqa: F401

logger = logging.getLogger(__name__)

# Shared engine for the whole app (singleton)
_engine = None


def get_engine():
    global _engine
    if _engine is None:
        db_url = settings.database_url

        kwargs = {"echo": False, "pool_pre_ping": True}
        if db_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # in-memory databases live in a single connection
            if db_url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool

        _engine = create_engine(db_url, **kwargs)
        logger.info("Database engine created (%s)", _engine.url.render_as_string(hide_password=True))

    return _engine


def init_db() -> None:
    """
    Creates all tables that do not exist yet.
    Runs on application startup.
    """
    engine = get_engine()
    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency, injected via Depends(get_session)
    """
    with Session(get_engine()) as session:
        yield session


@contextmanager
def guarded(session: Session, operation: str) -> Iterator[Session]:
    """Rolls back and re-raises any SQLAlchemy failure as StorageError."""
    try:
        yield session
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Storage failure during %s", operation)
        raise StorageError(operation, details=str(exc.__class__.__name__)) from exc
