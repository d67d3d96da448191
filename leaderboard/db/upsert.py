"""Conflict-aware bulk writes.

Every write to the store goes through :func:`bulk_upsert`. Rows are split into
batches and each batch becomes one parameterised multi-row ``INSERT ... ON
CONFLICT`` statement committed in its own transaction, so a failure leaves the
earlier batches in place and rerunning the whole call is safe.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine

from leaderboard.utils.batching import DEFAULT_BATCH_SIZE, batched

logger = logging.getLogger(__name__)

INSERT_CONSTRUCTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ConflictPolicy(enum.Enum):
    UPDATE = "update"
    IGNORE = "ignore"


@dataclass(slots=True)
class UpsertResult:
    submitted: int = 0
    affected: int = 0

    def __add__(self, other: UpsertResult) -> UpsertResult:
        return UpsertResult(self.submitted + other.submitted, self.affected + other.affected)


def bulk_upsert(
    engine: Engine,
    table: Table,
    rows: Iterable[Mapping[str, Any]],
    *,
    key: Sequence[str],
    policy: ConflictPolicy,
    update_columns: Sequence[str] = (),
    label: str | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> UpsertResult:
    if policy is ConflictPolicy.UPDATE and not update_columns:
        raise ValueError(f"Update-on-conflict upsert into {table.name} needs update_columns")
    insert = INSERT_CONSTRUCTS.get(engine.dialect.name)
    if insert is None:
        raise NotImplementedError(f"Upsert is not supported for dialect {engine.dialect.name}")

    label = label or table.name
    total = UpsertResult()
    for batch in batched(_dedupe(rows, key, policy), batch_size):
        stmt = insert(table).values(batch)
        if policy is ConflictPolicy.UPDATE:
            stmt = stmt.on_conflict_do_update(
                index_elements=list(key),
                set_={column: stmt.excluded[column] for column in update_columns},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(key))
        with engine.begin() as conn:
            result = conn.execute(stmt)
        affected = max(result.rowcount, 0)
        logger.info("Upserted %s/%s %s", affected, len(batch), label)
        total += UpsertResult(len(batch), affected)
    return total


def _dedupe(
    rows: Iterable[Mapping[str, Any]], key: Sequence[str], policy: ConflictPolicy
) -> list[dict[str, Any]]:
    # One statement may not touch the same row twice on PostgreSQL.
    unique: dict[tuple[Any, ...], dict[str, Any]] = {}
    for row in rows:
        identity = tuple(row[column] for column in key)
        if identity in unique and policy is ConflictPolicy.IGNORE:
            continue
        unique[identity] = dict(row)
    return list(unique.values())
