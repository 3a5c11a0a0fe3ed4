"""Database engine lifecycle and session management."""

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from yappy.config import get_settings

logger = logging.getLogger(__name__)

Base: Any = declarative_base()

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def init_engine(database_url: str | None = None) -> Engine:
    """Create the process-wide pooled engine if it does not exist yet.

    Safe to call more than once; later calls return the existing engine.
    """
    global _engine, _session_factory
    if _engine is not None:
        return _engine

    url = database_url or get_settings().database_url
    if url.startswith("sqlite"):
        _engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        _engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
        )
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info(f"Database engine initialized ({_engine.url.get_backend_name()})")
    return _engine


def shutdown_engine() -> None:
    """Dispose the pooled engine and forget it."""
    global _engine, _session_factory
    if _engine is None:
        return
    _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database engine disposed")


def get_session_factory() -> sessionmaker:
    """Return the session factory, initializing the engine on first use."""
    if _session_factory is None:
        init_engine()
    return _session_factory


def SessionLocal() -> Session:  # noqa: N802
    """Open a new session bound to the process-wide engine."""
    return get_session_factory()()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
