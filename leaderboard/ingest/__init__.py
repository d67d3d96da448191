"""Ingestion helpers."""

from __future__ import annotations

import pathlib
from typing import Iterable

import yaml

from leaderboard.ingest.models import (
    Activity,
    ActivityDefinition,
    ActivityDefinitionRecord,
    BadgeDefinition,
    BadgeLadder,
    BadgeThreshold,
    BadgeVariant,
)

ACTIVITY_DEFINITIONS_PATH = pathlib.Path(__file__).with_name("activity_definitions.yml")
BADGES_PATH = pathlib.Path(__file__).with_name("badges.yml")

BOT_SUFFIX = "[bot]"


def load_activity_definitions(path: pathlib.Path = ACTIVITY_DEFINITIONS_PATH) -> list[ActivityDefinitionRecord]:
    data = yaml.safe_load(path.read_text())
    return [
        ActivityDefinitionRecord(
            slug=ActivityDefinition(item["slug"]),
            name=item["name"],
            description=item["description"],
            points=int(item["points"]),
            icon=item.get("icon"),
        )
        for item in data
    ]


def load_badges(path: pathlib.Path = BADGES_PATH) -> list[tuple[BadgeDefinition, BadgeLadder]]:
    """Load badge definitions along with the ladder that awards each variant."""
    data = yaml.safe_load(path.read_text())
    badges: list[tuple[BadgeDefinition, BadgeLadder]] = []
    for item in data:
        variants: dict[str, BadgeVariant] = {}
        thresholds: list[BadgeThreshold] = []
        for key, variant in item["variants"].items():
            required = int(variant["threshold"])
            if required <= 0:
                raise ValueError(f"Badge {item['slug']} variant {key} needs a positive threshold")
            variants[str(key)] = BadgeVariant(
                description=variant["description"],
                svg_url=variant["svg_url"],
                requirement=variant.get("requirement"),
            )
            thresholds.append(BadgeThreshold(variant=str(key), required=required))
        definition = BadgeDefinition(
            slug=item["slug"],
            name=item["name"],
            description=item["description"],
            variants=variants,
        )
        ladder = BadgeLadder(
            badge=item["slug"],
            activity_definition=ActivityDefinition(item["activity"]),
            thresholds=sorted(thresholds, key=lambda t: t.required),
        )
        badges.append((definition, ladder))
    return badges


def is_bot(username: str) -> bool:
    return username.lower().endswith(BOT_SUFFIX)


def bot_usernames(activities: Iterable[Activity]) -> list[str]:
    return sorted({a.contributor for a in activities if is_bot(a.contributor)})
