"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_utc(value: datetime | None) -> datetime | None:
    """Return a UTC-normalized datetime, assuming naive values are already UTC.

    SQLite hands timestamps back without an offset even when they were
    written as aware datetimes, so every value read from the database goes
    through here.
    """

    if value is None:
        return None

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc)


def in_month(value: datetime | None, year: int, month: int) -> bool:
    """Whether ``value`` falls in the given UTC calendar month."""

    value = coerce_utc(value)
    return value is not None and value.year == year and value.month == month
