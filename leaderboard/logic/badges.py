"""Tiered badge awarding."""

from __future__ import annotations

import logging
from typing import Iterable

from leaderboard.db.store import ActivityCount, RecordStore
from leaderboard.db.upsert import UpsertResult
from leaderboard.ingest.models import BadgeLadder, ContributorBadge

logger = logging.getLogger(__name__)


def evaluate_awards(ladder: BadgeLadder, counts: Iterable[ActivityCount]) -> list[ContributorBadge]:
    """Return every (contributor, variant) award the counts qualify for.

    Thresholds are independent checks, so a contributor can earn several
    variants in one run. Every award is dated at the contributor's first
    qualifying activity.
    """
    awards: list[ContributorBadge] = []
    for entry in counts:
        for threshold in ladder.thresholds:
            if entry.count < threshold.required:
                continue
            awards.append(
                ContributorBadge(
                    badge=ladder.badge,
                    contributor=entry.contributor,
                    variant=threshold.variant,
                    achieved_on=entry.first_occured_at,
                    meta={"count": entry.count, "threshold": threshold.required},
                )
            )
    return awards


def award_badge(store: RecordStore, ladder: BadgeLadder) -> UpsertResult:
    counts = store.activity_counts(ladder.activity_definition)
    awards = evaluate_awards(ladder, counts)
    if not awards:
        logger.info("No %s badge candidates", ladder.badge)
        return UpsertResult()
    result = store.add_contributor_badges(awards)
    logger.info(
        "Awarded %s new %s badges (%s candidates across %s contributors)",
        result.affected,
        ladder.badge,
        result.submitted,
        len(counts),
    )
    return result
