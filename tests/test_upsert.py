import logging
from datetime import datetime

import pytest

from leaderboard.db import tables
from leaderboard.db.upsert import ConflictPolicy, UpsertResult, bulk_upsert
from leaderboard.db.store import RecordStore
from leaderboard.ingest.models import ContributorBadge


def test_add_contributors_ignores_existing(store):
    first = store.add_contributors(["alice", "bob", "alice"])
    assert first == UpsertResult(submitted=2, affected=2)

    second = store.add_contributors(["alice", "carol"])
    assert second == UpsertResult(submitted=2, affected=1)

    contributor = store.get_contributor("alice")
    assert contributor["role"] == "member"
    assert contributor["avatar_url"] == "https://avatars.githubusercontent.com/alice"
    assert contributor["social_profiles"] == {"github": "https://github.com/alice"}


def test_resubmitted_contributor_keeps_avatar(store):
    store.add_contributors(["alice"])
    result = store.upsert(
        tables.contributor,
        [{"username": "alice", "avatar_url": "https://example.com/other.png", "social_profiles": None}],
        key=("username",),
        policy=ConflictPolicy.IGNORE,
    )
    assert result.affected == 0
    assert store.get_contributor("alice")["avatar_url"] == "https://avatars.githubusercontent.com/alice"


def test_resubmitted_activity_updates_mutable_fields(store, merged_pr):
    store.add_contributors(["alice", "bob"])
    original = merged_pr("alice", day=2, tat=100, slug="pr_merged_1", title="Old title", text="body")
    store.add_activities([original])

    changed = merged_pr("bob", day=3, tat=999, slug="pr_merged_1", title="New title", text="other body")
    result = store.add_activities([changed])
    assert result.affected == 1

    row = store.get_activity("pr_merged_1")
    assert row["title"] == "New title"
    assert row["contributor"] == "bob"
    assert row["activity_definition"] == "pr_merged"
    assert row["occured_at"].day == 3
    # Only the mutable columns are overwritten.
    assert row["text"] == "body"
    assert row["meta"] == {"pr_avg_tat": 100}


def test_duplicate_keys_in_one_call_keep_last_update(store, merged_pr):
    store.add_contributors(["alice"])
    result = store.add_activities(
        [
            merged_pr("alice", slug="dup", title="first"),
            merged_pr("alice", slug="dup", title="second"),
        ]
    )
    assert result.submitted == 1
    assert store.get_activity("dup")["title"] == "second"


def test_writes_are_batched(engine, caplog):
    store = RecordStore(engine, batch_size=2)
    with caplog.at_level(logging.INFO, logger="leaderboard.db.upsert"):
        result = store.add_contributors([f"user{i}" for i in range(5)])
    assert result == UpsertResult(submitted=5, affected=5)
    messages = [r.getMessage() for r in caplog.records if r.name == "leaderboard.db.upsert"]
    assert messages == [
        "Upserted 2/2 new contributors",
        "Upserted 2/2 new contributors",
        "Upserted 1/1 new contributors",
    ]


def test_empty_input_skips_write(engine):
    result = bulk_upsert(engine, tables.contributor, [], key=("username",), policy=ConflictPolicy.IGNORE)
    assert result == UpsertResult()


def test_update_policy_requires_columns(engine):
    with pytest.raises(ValueError):
        bulk_upsert(
            engine,
            tables.contributor,
            [{"username": "alice"}],
            key=("username",),
            policy=ConflictPolicy.UPDATE,
        )


def test_update_bot_roles(store):
    store.add_contributors(["alice", "dependabot[bot]"])
    result = store.update_bot_roles(["dependabot[bot]", "dependabot[bot]", "ghost[bot]"])
    assert result == UpsertResult(submitted=2, affected=1)
    assert store.get_contributor("dependabot[bot]")["role"] == "bot"
    assert store.get_contributor("alice")["role"] == "member"
    assert store.update_bot_roles([]) == UpsertResult()


def test_badge_definition_upsert_overwrites(prepared_store):
    result = prepared_store.upsert(
        tables.badge_definition,
        [{"slug": "problem_solving", "name": "Renamed", "description": "d", "variants": {}}],
        key=("slug",),
        policy=ConflictPolicy.UPDATE,
        update_columns=("name", "description", "variants"),
    )
    assert result.affected == 1


def test_query_binds_parameters(store):
    store.add_contributors(["alice", "renovate[bot]"])
    store.update_bot_roles(["renovate[bot]"])
    rows = store.query("SELECT username, role FROM contributor WHERE role = :role", {"role": "bot"})
    assert rows == [{"username": "renovate[bot]", "role": "bot"}]


def test_empty_meta_is_stored_as_empty_object(prepared_store, merged_pr):
    prepared_store.add_contributors(["alice"])
    prepared_store.add_activities([merged_pr("alice", slug="s1", meta={})])
    prepared_store.add_contributor_badges(
        [ContributorBadge("problem_solving", "alice", "1x", datetime(2024, 1, 1), meta={})]
    )
    assert prepared_store.get_activity("s1")["meta"] == {}
    assert prepared_store.contributor_badges()[0].meta == {}
    prepared_store.add_activities([merged_pr("alice", slug="s2")])
    assert prepared_store.get_activity("s2")["meta"] is None
