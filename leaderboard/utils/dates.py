"""Datetime helpers."""

from __future__ import annotations

from datetime import datetime

import pendulum


def to_utc(value: datetime | str) -> pendulum.DateTime:
    """Normalise an aware/naive datetime or ISO string to UTC.

    Naive values are assumed to already be in UTC.
    """
    if isinstance(value, str):
        return pendulum.parse(value, tz="UTC").in_timezone("UTC")
    if value.tzinfo is None:
        return pendulum.instance(value, tz="UTC")
    return pendulum.instance(value).in_timezone("UTC")


def humanize_duration(milliseconds: int) -> str:
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    return pendulum.duration(milliseconds=milliseconds).in_words()
