"""Audit event record."""

from dataclasses import dataclass
from typing import Any

__all__ = ["LogEvent"]


@dataclass
class LogEvent:
    """One line of the audit log.

    Attributes
    ----------
    ts : str
        UTC timestamp with microseconds.
    run_id : str
        Run that emitted the event.
    level : str
        "DEBUG", "INFO", "WARN" or "ERROR".
    event : str
        Event name, e.g. "enrichment_lookup_failed".
    data : dict[str, Any]
        Payload, specific to the event name.
    stage : str | None
        Pipeline stage the event belongs to ("merge", "enrich", ...).
    rid : str | None
        Label of the publication record concerned, if any.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any]
    stage: str | None = None
    rid: str | None = None
