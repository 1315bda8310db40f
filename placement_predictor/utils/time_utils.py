"""Timestamp helpers shared by the repositories and pipeline stages."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 string stored in SQLite back into an aware datetime.

    SQLite ``strftime('%Y-%m-%dT%H:%M:%SZ')`` defaults carry a trailing ``Z``;
    values written from Python carry ``+00:00``. Both are accepted. Naive
    values are assumed to be UTC.
    """
    if value is None:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
