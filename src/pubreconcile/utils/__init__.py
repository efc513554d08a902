"""Common utility functions for pubreconcile."""

from pubreconcile.utils.timestamps import get_iso_timestamp, today_utc

__all__ = ["get_iso_timestamp", "today_utc"]
