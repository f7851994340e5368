"""Shared, deterministic timestamps for tests."""

from datetime import UTC, datetime, timedelta


# Fixed timestamp so recency, breaking-news and impression windows are stable.
FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=UTC)


def hours_ago(hours: float) -> datetime:
    """Timestamp the given number of hours before FIXED_NOW."""
    return FIXED_NOW - timedelta(hours=hours)
