"""Timestamp utilities for pubreconcile."""

from datetime import UTC, date, datetime

__all__ = ["get_iso_timestamp", "today_utc"]


def get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO8601 format with microseconds.

    Returns
    -------
    str
        ISO8601 timestamp (e.g., "2026-02-03T12:34:56.123456Z").
    """
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def today_utc() -> date:
    """Current UTC calendar date."""
    return datetime.now(UTC).date()
