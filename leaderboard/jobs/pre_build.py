"""Derive aggregates and badges from persisted activities."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from leaderboard.db.session import ConfigurationError, create_engine_from_env
from leaderboard.db.store import RecordStore
from leaderboard.ingest import load_badges
from leaderboard.logic.aggregates import calculate_pr_avg_tat
from leaderboard.logic.badges import award_badge

logger = logging.getLogger(__name__)


def run_pre_build() -> None:
    load_dotenv()
    store = RecordStore(create_engine_from_env())

    calculate_pr_avg_tat(store)
    for _definition, ladder in load_badges():
        award_badge(store, ladder)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    try:
        run_pre_build()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    except SQLAlchemyError as exc:
        print(f"Pre-build failed: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
