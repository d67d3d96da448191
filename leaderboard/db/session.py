"""Database session helpers."""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


class ConfigurationError(RuntimeError):
    pass


def database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise ConfigurationError(
            "'DATABASE_URL' environment needs to be set with a SQLAlchemy URL for the leaderboard database."
        )
    return url


def create_engine_from_env() -> Engine:
    """Create an engine using the DATABASE_URL environment variable."""
    return create_engine(database_url(), pool_pre_ping=True, future=True)
