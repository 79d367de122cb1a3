from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import AbstractContextManager, contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from plan_editor.config.settings import settings

# Lazy initialization to avoid import-time database connections
_engine = None
_SessionLocal = None

SessionFactory = Callable[[], AbstractContextManager[Session]]


def _get_engine():
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {settings.database_url}")

        connect_args = {}
        if "sqlite" in settings.database_url.lower():
            connect_args = {"check_same_thread": False}
            logger.warning("Using SQLite database (local development only)")

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,
        )
        logger.info("Database engine initialized")
    return _engine


def get_engine():
    """Get or create the database engine (public API)."""
    return _get_engine()


def _get_session_local():
    """Get or create the session factory (lazy initialization)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
        logger.info("Database session factory initialized")
    return _SessionLocal


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get database session context manager.

    Commits on clean exit, rolls back and re-raises on any exception.
    """
    session = _get_session_local()()
    try:
        yield session
        if session.dirty or session.new or session.deleted:
            session.commit()
    except Exception as e:
        logger.error(f"Database session error, rolling back: {type(e).__name__}: {e}")
        session.rollback()
        raise
    finally:
        session.close()
