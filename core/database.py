"""
Database connection and session management module.

This module provides the SQLAlchemy engine and session factory, the
declarative Base for models, and the dependency and transaction helpers
used by FastAPI endpoints and the service layer.
"""

from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from core.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    """Build create_engine() keyword arguments for the given database URL."""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live inside a single connection
        if url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url:
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ships with foreign key enforcement off; ON DELETE CASCADE needs it."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for database session.

    This function is designed to be used as a FastAPI dependency to provide
    database sessions to route handlers. It ensures proper session cleanup
    after each request.

    Yields:
        Session: SQLAlchemy session

    Example:
        @app.get("/weddings")
        def list_weddings(db: Session = Depends(get_db)):
            return db.query(Wedding).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block of work as one transaction.

    Commits when the block finishes and rolls back if it raises.

    Example:
        with atomic(db):
            guest.checked_in = True
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
