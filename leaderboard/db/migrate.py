"""Database migration helpers."""

from __future__ import annotations

import sys

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from leaderboard.db.session import ConfigurationError, create_engine_from_env
from leaderboard.db.tables import metadata


def run_migrations(engine: Engine) -> None:
    """Create any missing leaderboard tables."""
    metadata.create_all(engine)


def main() -> None:
    try:
        engine = create_engine_from_env()
    except ConfigurationError as exc:  # pragma: no cover - env failure is user error
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    try:
        run_migrations(engine)
    except SQLAlchemyError as exc:
        print(f"Migration failed: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
