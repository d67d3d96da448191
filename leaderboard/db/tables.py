"""Table definitions for the leaderboard store."""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, MetaData, Table, Text
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

JSONType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

contributor = Table(
    "contributor",
    metadata,
    Column("username", Text, primary_key=True),
    Column("role", Text, nullable=False, server_default="member"),
    Column("avatar_url", Text),
    Column("social_profiles", JSONType),
)

activity_definition = Table(
    "activity_definition",
    metadata,
    Column("slug", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("points", Integer, nullable=False, server_default="0"),
    Column("icon", Text),
)

activity = Table(
    "activity",
    metadata,
    Column("slug", Text, primary_key=True),
    Column("contributor", Text, ForeignKey("contributor.username"), nullable=False, index=True),
    Column("activity_definition", Text, ForeignKey("activity_definition.slug"), nullable=False, index=True),
    Column("title", Text),
    Column("occured_at", DateTime(timezone=True), nullable=False),
    Column("link", Text),
    Column("text", Text),
    Column("points", Integer),
    Column("meta", JSONType),
)

global_aggregate = Table(
    "global_aggregate",
    metadata,
    Column("slug", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("value", JSONType),
)

contributor_aggregate_definition = Table(
    "contributor_aggregate_definition",
    metadata,
    Column("slug", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
)

contributor_aggregate = Table(
    "contributor_aggregate",
    metadata,
    Column("aggregate", Text, ForeignKey("contributor_aggregate_definition.slug"), primary_key=True),
    Column("contributor", Text, ForeignKey("contributor.username"), primary_key=True),
    Column("value", JSONType, nullable=False),
)

badge_definition = Table(
    "badge_definition",
    metadata,
    Column("slug", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("variants", JSONType, nullable=False),
)

contributor_badge = Table(
    "contributor_badge",
    metadata,
    Column("slug", Text, primary_key=True),
    Column("badge", Text, ForeignKey("badge_definition.slug"), nullable=False),
    Column("contributor", Text, ForeignKey("contributor.username"), nullable=False, index=True),
    Column("variant", Text, nullable=False),
    Column("achieved_on", DateTime(timezone=True), nullable=False),
    Column("meta", JSONType),
)
