"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from pollfeed.core.settings import Settings, settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import pollfeed.models  # noqa: E402,F401


def engine_options(config: Settings) -> dict[str, Any]:
    """Return driver options enforcing bounded connect and statement timeouts."""
    url = config.effective_database_url
    if url.startswith("sqlite"):
        # pysqlite's timeout bounds how long a writer waits on a locked database.
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": config.store_operation_timeout_seconds,
            },
        }
    statement_timeout_ms = int(config.store_operation_timeout_seconds * 1000)
    return {
        "pool_timeout": config.store_connect_timeout_seconds,
        "connect_args": {
            "connect_timeout": int(config.store_connect_timeout_seconds),
            "options": f"-c statement_timeout={statement_timeout_ms}",
        },
    }


def build_engine(config: Settings = settings) -> Engine:
    """Create an engine for the configured store."""
    return create_engine(
        config.effective_database_url,
        pool_pre_ping=True,
        echo=config.sql_debug,
        **engine_options(config),
    )


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
