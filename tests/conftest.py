from datetime import datetime

import pytest
from sqlalchemy import create_engine

from leaderboard.db.migrate import run_migrations
from leaderboard.db.store import RecordStore
from leaderboard.ingest import load_activity_definitions, load_badges
from leaderboard.ingest.models import Activity, ActivityDefinition
from leaderboard.logic.aggregates import CONTRIBUTOR_AGGREGATE_DEFINITIONS, GLOBAL_AGGREGATE_DEFINITIONS


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    run_migrations(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    return RecordStore(engine)


@pytest.fixture()
def prepared_store(store):
    store.upsert_activity_definitions(load_activity_definitions())
    store.upsert_global_aggregate_definitions(GLOBAL_AGGREGATE_DEFINITIONS)
    store.upsert_contributor_aggregate_definitions(CONTRIBUTOR_AGGREGATE_DEFINITIONS)
    for definition, _ladder in load_badges():
        store.upsert_badge_definition(definition)
    return store


@pytest.fixture()
def merged_pr():
    counter = iter(range(1, 100_000))

    def _merged_pr(contributor, day=1, tat=None, **kwargs):
        number = next(counter)
        meta = kwargs.pop("meta", None)
        if meta is None and tat is not None:
            meta = {"pr_avg_tat": tat}
        return Activity(
            slug=kwargs.pop("slug", f"pr_merged_{contributor}_{number}"),
            contributor=contributor,
            activity_definition=kwargs.pop("activity_definition", ActivityDefinition.PR_MERGED),
            occured_at=datetime(2024, 1, day, 10, 0),
            title=kwargs.pop("title", f"PR #{number}"),
            link=f"https://github.com/org/repo/pull/{number}",
            meta=meta,
            **kwargs,
        )

    return _merged_pr
