"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def parse_github_datetime(value: str) -> dt.datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime.

    GitHub emits ``2023-05-15T00:00:00Z``; the trailing ``Z`` is accepted as
    well as explicit offsets. Naive timestamps are rejected.

    Examples
    --------
    >>> parse_github_datetime("2023-05-15T00:00:00Z").isoformat()
    '2023-05-15T00:00:00+00:00'

    """
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        msg = f"GitHub datetime missing timezone: {value}"
        raise ValueError(msg)
    return parsed.astimezone(dt.UTC)


def format_github_datetime(value: dt.datetime) -> str:
    """Render an aware datetime in the ``YYYY-MM-DDTHH:MM:SSZ`` form GitHub expects."""
    if value.tzinfo is None:
        msg = "datetime must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
