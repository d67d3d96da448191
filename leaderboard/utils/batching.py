"""Batching helpers for bulk writes."""

from __future__ import annotations

import os
from itertools import islice
from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")

DEFAULT_BATCH_SIZE = int(os.environ.get("UPSERT_BATCH_SIZE", 1000))


def batched(items: Iterable[T], size: int = DEFAULT_BATCH_SIZE) -> Iterator[list[T]]:
    """Yield contiguous chunks of at most ``size`` items, in order."""
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    iterator = iter(items)
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield chunk
