"""Leaderboard data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Mapping, Union


class ActivityDefinition(str, Enum):
    ISSUE_OPENED = "issue_opened"
    ISSUE_CLOSED = "issue_closed"
    PR_OPENED = "pr_opened"
    PR_CLOSED = "pr_closed"
    PR_MERGED = "pr_merged"
    PR_REVIEWED = "pr_reviewed"
    PR_COLLABORATED = "pr_collaborated"
    ISSUE_ASSIGNED = "issue_assigned"
    COMMENT_CREATED = "comment_created"
    COMMIT_CREATED = "commit_created"


@dataclass(slots=True)
class ActivityDefinitionRecord:
    slug: ActivityDefinition
    name: str
    description: str
    points: int
    icon: str | None = None


@dataclass(slots=True)
class Activity:
    slug: str
    contributor: str
    activity_definition: ActivityDefinition
    occured_at: datetime
    title: str | None = None
    link: str | None = None
    text: str | None = None
    points: int | None = None
    meta: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class DurationValue:
    """Duration in milliseconds."""

    value: int
    type: ClassVar[str] = "duration"


@dataclass(frozen=True, slots=True)
class NumberValue:
    value: int | float
    type: ClassVar[str] = "number"


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str
    type: ClassVar[str] = "string"


AggregateValue = Union[DurationValue, NumberValue, StringValue]

AGGREGATE_VALUE_TYPES: dict[str, type] = {
    DurationValue.type: DurationValue,
    NumberValue.type: NumberValue,
    StringValue.type: StringValue,
}


def dump_aggregate_value(value: AggregateValue) -> dict[str, Any]:
    return {"type": value.type, "value": value.value}


def load_aggregate_value(payload: Mapping[str, Any] | None) -> AggregateValue | None:
    """Decode a stored ``{"type": ..., "value": ...}`` payload."""
    if payload is None:
        return None
    kind = payload.get("type")
    value_cls = AGGREGATE_VALUE_TYPES.get(kind)
    if value_cls is None:
        raise ValueError(f"Unknown aggregate value type: {kind!r}")
    return value_cls(payload["value"])


@dataclass(slots=True)
class AggregateDefinition:
    slug: str
    name: str
    description: str | None = None


@dataclass(slots=True)
class GlobalAggregate:
    slug: str
    name: str
    description: str | None = None
    value: AggregateValue | None = None


@dataclass(slots=True)
class ContributorAggregate:
    aggregate: str
    contributor: str
    value: AggregateValue


@dataclass(slots=True)
class BadgeVariant:
    description: str
    svg_url: str
    requirement: str | None = None


@dataclass(slots=True)
class BadgeDefinition:
    slug: str
    name: str
    description: str
    variants: dict[str, BadgeVariant] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BadgeThreshold:
    variant: str
    required: int


@dataclass(slots=True)
class BadgeLadder:
    """Count thresholds that gate each variant of a badge."""

    badge: str
    activity_definition: ActivityDefinition
    thresholds: list[BadgeThreshold]


@dataclass(slots=True)
class ContributorBadge:
    badge: str
    contributor: str
    variant: str
    achieved_on: datetime
    meta: Mapping[str, Any] | None = None

    @property
    def slug(self) -> str:
        return contributor_badge_slug(self.badge, self.contributor, self.variant)


def contributor_badge_slug(badge: str, contributor: str, variant: str) -> str:
    return f"{badge}__{contributor}__{variant}"
