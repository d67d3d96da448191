"""Aggregate computation over the activity log."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import numpy as np

from leaderboard.db.store import RecordStore
from leaderboard.ingest.models import (
    AggregateDefinition,
    ContributorAggregate,
    DurationValue,
    GlobalAggregate,
)
from leaderboard.utils.dates import humanize_duration

logger = logging.getLogger(__name__)

PR_AVG_TAT = AggregateDefinition(
    slug="pr_avg_tat",
    name="PR Avg. Turn-Around Time",
    description="Average time taken to get a PR merged since it has been opened",
)

GLOBAL_AGGREGATE_DEFINITIONS = [PR_AVG_TAT]
CONTRIBUTOR_AGGREGATE_DEFINITIONS = [PR_AVG_TAT]

TAT_META_KEY = "pr_avg_tat"


@dataclass(slots=True)
class TurnaroundAverages:
    overall: DurationValue | None = None
    by_contributor: dict[str, DurationValue] = field(default_factory=dict)


def round_half_away(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)


def mean_duration(values: Iterable[float]) -> DurationValue:
    return DurationValue(round_half_away(float(np.mean(list(values)))))


def as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def average_turnaround(rows: Iterable[tuple[str, Mapping[str, Any] | None]]) -> TurnaroundAverages:
    """Average the turn-around time recorded on merged PRs.

    ``rows`` are ``(contributor, meta)`` pairs. Rows without a usable numeric
    ``pr_avg_tat`` are skipped rather than failing the whole computation.
    """
    by_contributor: dict[str, list[float]] = defaultdict(list)
    combined: list[float] = []
    for contributor, meta in rows:
        if not isinstance(meta, Mapping) or TAT_META_KEY not in meta:
            continue
        tat = as_number(meta[TAT_META_KEY])
        if tat is None:
            logger.debug("Skipping non-numeric %s for %s: %r", TAT_META_KEY, contributor, meta[TAT_META_KEY])
            continue
        by_contributor[contributor].append(tat)
        combined.append(tat)

    if not combined:
        return TurnaroundAverages()
    return TurnaroundAverages(
        overall=mean_duration(combined),
        by_contributor={contributor: mean_duration(tats) for contributor, tats in by_contributor.items()},
    )


def calculate_pr_avg_tat(store: RecordStore) -> TurnaroundAverages:
    averages = average_turnaround(store.pr_merged_meta())

    if averages.by_contributor:
        store.upsert_contributor_aggregates(
            ContributorAggregate(aggregate=PR_AVG_TAT.slug, contributor=contributor, value=value)
            for contributor, value in averages.by_contributor.items()
        )
        logger.info("Updated PR avg TAT for %s contributors", len(averages.by_contributor))

    if averages.overall is not None:
        store.upsert_global_aggregates(
            [
                GlobalAggregate(
                    slug=PR_AVG_TAT.slug,
                    name=PR_AVG_TAT.name,
                    description=PR_AVG_TAT.description,
                    value=averages.overall,
                )
            ]
        )
        logger.info(
            "Updated global PR avg TAT: %sms (%s)",
            averages.overall.value,
            humanize_duration(averages.overall.value),
        )
    else:
        logger.info("No merged PRs with turn-around time; aggregates left untouched")
    return averages
