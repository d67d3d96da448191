"""Record store for contributors, activities, aggregates and badges."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import Table, func, select, text, update
from sqlalchemy.engine import Engine

from leaderboard.db import tables
from leaderboard.db.upsert import ConflictPolicy, UpsertResult, bulk_upsert
from leaderboard.ingest.models import (
    Activity,
    ActivityDefinition,
    ActivityDefinitionRecord,
    AggregateDefinition,
    BadgeDefinition,
    ContributorAggregate,
    ContributorBadge,
    GlobalAggregate,
    dump_aggregate_value,
    load_aggregate_value,
)
from leaderboard.utils.batching import DEFAULT_BATCH_SIZE, batched
from leaderboard.utils.dates import to_utc

logger = logging.getLogger(__name__)

AVATAR_URL = "https://avatars.githubusercontent.com/{username}"
GITHUB_PROFILE_URL = "https://github.com/{username}"

ACTIVITY_UPDATE_COLUMNS = ("contributor", "activity_definition", "title", "occured_at", "link")


@dataclass(slots=True)
class ActivityCount:
    contributor: str
    count: int
    first_occured_at: datetime


class RecordStore:
    """Explicit handle over the leaderboard database.

    Holds only the engine; nothing read from the database is cached between
    calls.
    """

    def __init__(self, engine: Engine, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self.engine = engine
        self.batch_size = batch_size

    def upsert(
        self,
        table: Table,
        rows: Iterable[Mapping[str, Any]],
        *,
        key: Sequence[str],
        policy: ConflictPolicy,
        update_columns: Sequence[str] = (),
        label: str | None = None,
    ) -> UpsertResult:
        return bulk_upsert(
            self.engine,
            table,
            rows,
            key=key,
            policy=policy,
            update_columns=update_columns,
            label=label,
            batch_size=self.batch_size,
        )

    # Definitions

    def upsert_activity_definitions(self, definitions: Iterable[ActivityDefinitionRecord]) -> UpsertResult:
        return self.upsert(
            tables.activity_definition,
            (
                {
                    "slug": d.slug.value,
                    "name": d.name,
                    "description": d.description,
                    "points": d.points,
                    "icon": d.icon,
                }
                for d in definitions
            ),
            key=("slug",),
            policy=ConflictPolicy.UPDATE,
            update_columns=("name", "description", "points", "icon"),
            label="activity definitions",
        )

    def upsert_global_aggregate_definitions(self, definitions: Iterable[AggregateDefinition]) -> UpsertResult:
        # Leaves any computed value in place.
        return self.upsert(
            tables.global_aggregate,
            ({"slug": d.slug, "name": d.name, "description": d.description} for d in definitions),
            key=("slug",),
            policy=ConflictPolicy.UPDATE,
            update_columns=("name", "description"),
            label="global aggregate definitions",
        )

    def upsert_contributor_aggregate_definitions(self, definitions: Iterable[AggregateDefinition]) -> UpsertResult:
        return self.upsert(
            tables.contributor_aggregate_definition,
            ({"slug": d.slug, "name": d.name, "description": d.description} for d in definitions),
            key=("slug",),
            policy=ConflictPolicy.UPDATE,
            update_columns=("name", "description"),
            label="contributor aggregate definitions",
        )

    def upsert_badge_definition(self, definition: BadgeDefinition) -> UpsertResult:
        variants = {
            key: {
                "description": variant.description,
                "svg_url": variant.svg_url,
                "requirement": variant.requirement,
            }
            for key, variant in definition.variants.items()
        }
        return self.upsert(
            tables.badge_definition,
            [
                {
                    "slug": definition.slug,
                    "name": definition.name,
                    "description": definition.description,
                    "variants": variants,
                }
            ],
            key=("slug",),
            policy=ConflictPolicy.UPDATE,
            update_columns=("name", "description", "variants"),
            label="badge definitions",
        )

    # Contributors and activities

    def add_contributors(self, usernames: Iterable[str]) -> UpsertResult:
        """Insert unseen contributors; existing rows keep their profile fields."""
        return self.upsert(
            tables.contributor,
            (
                {
                    "username": username,
                    "avatar_url": AVATAR_URL.format(username=username),
                    "social_profiles": {"github": GITHUB_PROFILE_URL.format(username=username)},
                }
                for username in usernames
            ),
            key=("username",),
            policy=ConflictPolicy.IGNORE,
            label="new contributors",
        )

    def add_activities(self, activities: Iterable[Activity]) -> UpsertResult:
        return self.upsert(
            tables.activity,
            (
                {
                    "slug": a.slug,
                    "contributor": a.contributor,
                    "activity_definition": ActivityDefinition(a.activity_definition).value,
                    "title": a.title,
                    "occured_at": to_utc(a.occured_at),
                    "link": a.link,
                    "text": a.text,
                    "points": a.points,
                    "meta": dict(a.meta) if a.meta is not None else None,
                }
                for a in activities
            ),
            key=("slug",),
            policy=ConflictPolicy.UPDATE,
            update_columns=ACTIVITY_UPDATE_COLUMNS,
            label="activities",
        )

    def update_bot_roles(self, usernames: Iterable[str]) -> UpsertResult:
        unique = list(dict.fromkeys(usernames))
        if not unique:
            logger.info("No bot users to update")
            return UpsertResult()
        total = UpsertResult()
        for batch in batched(unique, self.batch_size):
            stmt = (
                update(tables.contributor)
                .where(tables.contributor.c.username.in_(batch))
                .values(role="bot")
            )
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
            logger.info("Updated %s/%s bot contributors", result.rowcount, len(batch))
            total += UpsertResult(len(batch), result.rowcount)
        return total

    # Aggregates and badges

    def upsert_global_aggregates(self, aggregates: Iterable[GlobalAggregate]) -> UpsertResult:
        return self.upsert(
            tables.global_aggregate,
            (
                {
                    "slug": g.slug,
                    "name": g.name,
                    "description": g.description,
                    "value": dump_aggregate_value(g.value) if g.value is not None else None,
                }
                for g in aggregates
            ),
            key=("slug",),
            policy=ConflictPolicy.UPDATE,
            update_columns=("name", "description", "value"),
            label="global aggregates",
        )

    def upsert_contributor_aggregates(self, aggregates: Iterable[ContributorAggregate]) -> UpsertResult:
        return self.upsert(
            tables.contributor_aggregate,
            (
                {
                    "aggregate": c.aggregate,
                    "contributor": c.contributor,
                    "value": dump_aggregate_value(c.value),
                }
                for c in aggregates
            ),
            key=("aggregate", "contributor"),
            policy=ConflictPolicy.UPDATE,
            update_columns=("value",),
            label="contributor aggregates",
        )

    def add_contributor_badges(self, badges: Iterable[ContributorBadge]) -> UpsertResult:
        """Award badges; an already held variant is never re-dated."""
        return self.upsert(
            tables.contributor_badge,
            (
                {
                    "slug": b.slug,
                    "badge": b.badge,
                    "contributor": b.contributor,
                    "variant": b.variant,
                    "achieved_on": to_utc(b.achieved_on),
                    "meta": dict(b.meta) if b.meta is not None else None,
                }
                for b in badges
            ),
            key=("slug",),
            policy=ConflictPolicy.IGNORE,
            label="contributor badges",
        )

    # Queries

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a read-only SQL query with bound parameters."""
        with self.engine.connect() as conn:
            result = conn.execute(text(sql), dict(params or {}))
            return [dict(row) for row in result.mappings()]

    def pr_merged_meta(self) -> list[tuple[str, Mapping[str, Any] | None]]:
        query = select(tables.activity.c.contributor, tables.activity.c.meta).where(
            tables.activity.c.activity_definition == ActivityDefinition.PR_MERGED.value
        )
        with self.engine.connect() as conn:
            return [(row.contributor, row.meta) for row in conn.execute(query)]

    def activity_counts(self, kind: ActivityDefinition) -> list[ActivityCount]:
        """Count activities of ``kind`` per contributor with the first occurrence."""
        query = (
            select(
                tables.activity.c.contributor,
                func.count().label("total"),
                func.min(tables.activity.c.occured_at).label("first_occured_at"),
            )
            .where(tables.activity.c.activity_definition == ActivityDefinition(kind).value)
            .group_by(tables.activity.c.contributor)
            .order_by(tables.activity.c.contributor)
        )
        with self.engine.connect() as conn:
            return [
                ActivityCount(row.contributor, int(row.total), row.first_occured_at)
                for row in conn.execute(query)
            ]

    def get_contributor(self, username: str) -> dict[str, Any] | None:
        return self._fetch_one(tables.contributor, tables.contributor.c.username == username)

    def get_activity(self, slug: str) -> dict[str, Any] | None:
        return self._fetch_one(tables.activity, tables.activity.c.slug == slug)

    def get_global_aggregate(self, slug: str) -> GlobalAggregate | None:
        row = self._fetch_one(tables.global_aggregate, tables.global_aggregate.c.slug == slug)
        if row is None:
            return None
        return GlobalAggregate(
            slug=row["slug"],
            name=row["name"],
            description=row["description"],
            value=load_aggregate_value(row["value"]),
        )

    def contributor_aggregates(self, aggregate: str) -> list[ContributorAggregate]:
        query = (
            select(tables.contributor_aggregate)
            .where(tables.contributor_aggregate.c.aggregate == aggregate)
            .order_by(tables.contributor_aggregate.c.contributor)
        )
        with self.engine.connect() as conn:
            return [
                ContributorAggregate(row.aggregate, row.contributor, load_aggregate_value(row.value))
                for row in conn.execute(query)
            ]

    def contributor_badges(self, badge: str | None = None) -> list[ContributorBadge]:
        query = select(tables.contributor_badge).order_by(tables.contributor_badge.c.slug)
        if badge is not None:
            query = query.where(tables.contributor_badge.c.badge == badge)
        with self.engine.connect() as conn:
            return [
                ContributorBadge(
                    badge=row.badge,
                    contributor=row.contributor,
                    variant=row.variant,
                    achieved_on=row.achieved_on,
                    meta=row.meta,
                )
                for row in conn.execute(query)
            ]

    def _fetch_one(self, table: Table, clause) -> dict[str, Any] | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(table).where(clause)).mappings().one_or_none()
        return dict(row) if row is not None else None
