"""Database infrastructure for the ledger engine.

This module exposes helpers to create and reuse the SQLAlchemy engine
connected to the GnuCash database. Connection settings come from the
environment, optionally loaded from a ``.env`` file.
"""

import os
from typing import Optional

import dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from src.application.ports.database import DatabaseEnginePort


def _get_env_var(name: str) -> str:
    """Read an environment variable or raise a descriptive error.

    Args:
        name: Name of the environment variable to read.

    Returns:
        str: The raw value of the environment variable.

    Raises:
        RuntimeError: If the environment variable is missing or empty.
    """
    dotenv.load_dotenv()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}")
    return value


def _create_engine(db_url: str) -> Engine:
    """Create a pooled SQLAlchemy engine with health checks enabled."""
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        future=True,
    )


_gnucash_engine: Optional[Engine] = None


def get_gnucash_engine() -> Engine:
    """Get a singleton SQLAlchemy engine for the GnuCash database.

    Returns:
        Engine: Lazily initialized engine connected to ``GNUCASH_DB_URL``.
    """
    global _gnucash_engine
    if _gnucash_engine is None:
        db_url = _get_env_var("GNUCASH_DB_URL")
        _gnucash_engine = _create_engine(db_url)
    return _gnucash_engine


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """DatabaseEnginePort implementation backed by the shared engine."""

    def get_gnucash_engine(self) -> Engine:
        return get_gnucash_engine()


__all__ = [
    "get_gnucash_engine",
    "SqlAlchemyDatabaseEngineAdapter",
]
