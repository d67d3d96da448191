"""Definition upserts run before any activity is imported."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from leaderboard.db.session import ConfigurationError, create_engine_from_env
from leaderboard.db.store import RecordStore
from leaderboard.ingest import load_activity_definitions, load_badges
from leaderboard.logic.aggregates import CONTRIBUTOR_AGGREGATE_DEFINITIONS, GLOBAL_AGGREGATE_DEFINITIONS

logger = logging.getLogger(__name__)


def run_prepare() -> None:
    load_dotenv()
    store = RecordStore(create_engine_from_env())

    store.upsert_activity_definitions(load_activity_definitions())
    store.upsert_global_aggregate_definitions(GLOBAL_AGGREGATE_DEFINITIONS)
    store.upsert_contributor_aggregate_definitions(CONTRIBUTOR_AGGREGATE_DEFINITIONS)
    for definition, _ladder in load_badges():
        store.upsert_badge_definition(definition)
    logger.info("Badge definitions upserted")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    try:
        run_prepare()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    except SQLAlchemyError as exc:
        print(f"Prepare failed: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
