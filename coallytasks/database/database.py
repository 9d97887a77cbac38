"""Database connection and session management for coallytasks.

This module supports both:
- Local SQLite (default for dev)
- Any other SQLAlchemy URL (e.g. PostgreSQL) via `DATABASE_URL`

The engine and session factory are built from `Settings` by the app factory
and stored on `app.state`; there is no module-level engine.
"""

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from coallytasks.config import Settings

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def get_engine_kwargs(settings: Settings) -> dict:
    """Return deterministic create_engine kwargs for the configured DB URL.

    This is separated to allow deterministic unit testing without connecting.
    """
    engine_kwargs: dict = {
        "echo": settings.debug,
        # Helps avoid stale DB connections.
        "pool_pre_ping": True,
    }

    if _is_sqlite_url(settings.database_url):
        # SQLite-specific setting required for FastAPI's threadpool in a single process.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        return engine_kwargs

    engine_kwargs["pool_size"] = settings.db_pool_size
    engine_kwargs["max_overflow"] = settings.db_max_overflow
    engine_kwargs["pool_timeout"] = settings.db_pool_timeout_sec
    return engine_kwargs


def build_engine(settings: Settings) -> Engine:
    engine = create_engine(settings.database_url, **get_engine_kwargs(settings))
    if _is_sqlite_url(settings.database_url):
        event.listen(engine, "connect", set_sqlite_pragmas)
    return engine


def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Enable foreign keys so tasks cannot reference a missing user."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """Get database session (dependency for FastAPI)."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine, settings: Settings) -> None:
    """Initialize database schema.

    - SQLite (default dev): use `create_all()`.
    - Other databases: run Alembic migrations when `RUN_MIGRATIONS=true`,
      otherwise fall back to `create_all()`.
    """
    if settings.run_migrations and not _is_sqlite_url(settings.database_url):
        # Run Alembic migrations in-process (non-interactive).
        from alembic import command
        from alembic.config import Config

        alembic_cfg = Config(settings.alembic_ini)
        # Ensure Alembic uses the same runtime DB URL.
        alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
        logger.info("Running database migrations")
        command.upgrade(alembic_cfg, "head")
        return

    # Import models so they register on Base.metadata.
    from coallytasks.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
