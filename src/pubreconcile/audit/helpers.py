"""Run identifiers and the version string sent to external services."""

import importlib.metadata
import secrets
from datetime import UTC, datetime

__all__ = ["generate_run_id", "get_package_version"]


def generate_run_id() -> str:
    """Return a fresh run identifier.

    The identifier is the UTC start time followed by eight hex characters,
    e.g. ``2024-09-01T08:30:00.123456Z__9f2c01ab``, so identifiers sort by
    start time and two runs started in the same microsecond still differ.
    """
    started = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    return f"{started}__{secrets.token_hex(4)}"


def get_package_version() -> str:
    # Source checkouts that were never installed have no distribution metadata.
    try:
        return importlib.metadata.version("pubreconcile")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"
