"""JSONL audit log of a reconciliation run.

Every recoverable failure in a run (an unavailable source, a failed
enrichment lookup, a skipped researcher) is reported here instead of
being raised, so the log is the only record of what a run left out.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from pubreconcile.audit.models import LogEvent
from pubreconcile.utils import get_iso_timestamp

__all__ = ["AuditLogger", "LEVELS"]

LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


class AuditLogger:
    """Append-only JSONL event writer.

    One JSON object per line, flushed after every event so a crashed run
    still leaves a readable log. Several runs may append to one file; the
    ``run_id`` field tells them apart.

    Attributes
    ----------
    run_id : str
        Run identifier stamped on every event.
    log_path : Path
        JSONL file.
    min_level : str
        Events below this level are dropped.
    current_stage : str | None
        Stage stamped on events that do not name one.
    """

    def __init__(self, run_id: str, log_path: Path, min_level: str = "DEBUG") -> None:
        """Open ``log_path`` for appending, creating parent directories.

        Parameters
        ----------
        run_id : str
            Run identifier.
        log_path : Path
            JSONL file.
        min_level : str, optional
            Lowest level written, one of ``LEVELS`` (default: "DEBUG").
        """
        if min_level not in LEVELS:
            raise ValueError(f"min_level must be one of {LEVELS}, got {min_level!r}")

        self.run_id = run_id
        self.log_path = Path(log_path)
        self.min_level = min_level
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Flush and close the file. Safe to call twice."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        self.current_stage = stage

    def enabled(self, level: str) -> bool:
        """True if events at ``level`` are written."""
        return LEVELS.index(level) >= LEVELS.index(self.min_level)

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Append one event.

        Parameters
        ----------
        event_type : str
            Event name, e.g. "source_fetched".
        data : dict[str, Any] | None, optional
            JSON-serializable payload.
        level : str, optional
            One of ``LEVELS`` (default: "INFO").
        stage : str | None, optional
            Stage name. Defaults to ``current_stage``.
        rid : str | None, optional
            Label of the record the event is about.
        """
        if not self.enabled(level):
            return

        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data if data is not None else {},
            stage=stage if stage is not None else self.current_stage,
            rid=rid,
        )
        json.dump(asdict(log_event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    # ------------------------------------------------------------------
    # Run and stage brackets
    # ------------------------------------------------------------------

    def run_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Record the command line and the effective run parameters."""
        self.event("run_started", data={"command": command, "parameters": parameters})

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        records_written: int | None = None,
    ) -> None:
        """Record the run outcome.

        Parameters
        ----------
        status : str
            "success" or "failed".
        duration_seconds : float
            Wall-clock duration of the run.
        records_written : int | None, optional
            Publications in the output file, when the run wrote one.
        """
        data: dict[str, Any] = {"status": status, "duration_seconds": duration_seconds}
        if records_written is not None:
            data["records_written"] = records_written
        self.event("run_finished", data=data)

    def stage_started(self, stage: str, expected_records: int | None = None) -> None:
        """Make ``stage`` the current stage and record its start."""
        self.set_stage(stage)
        data = {} if expected_records is None else {"expected_records": expected_records}
        self.event("stage_started", data=data, stage=stage)

    def stage_finished(
        self,
        stage: str,
        duration_seconds: float,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Record the end of a stage with its counters, if any."""
        data: dict[str, Any] = {"duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters
        self.event("stage_finished", data=data, stage=stage)

    # ------------------------------------------------------------------
    # Recovered failures
    # ------------------------------------------------------------------

    def source_unavailable(self, source: str, researcher_id: str, message: str) -> None:
        """A source returned nothing usable for one researcher."""
        self.event(
            "source_unavailable",
            data={"source": source, "researcher_id": researcher_id, "message": message},
            level="WARN",
        )

    def researcher_skipped(self, researcher_id: str, reason: str) -> None:
        """A researcher was not fetched from any source."""
        self.event(
            "researcher_skipped",
            data={"researcher_id": researcher_id, "reason": reason},
            level="WARN",
        )

    def lookup_failed(
        self,
        service: str,
        operation: str,
        message: str,
        rid: str | None = None,
    ) -> None:
        """An enrichment lookup raised or timed out.

        Parameters
        ----------
        service : str
            External service name (e.g., "crossref").
        operation : str
            Operation that failed (e.g., "lookup_by_id").
        message : str
            Exception class and message.
        rid : str | None, optional
            Label of the record being enriched.
        """
        self.event(
            "enrichment_lookup_failed",
            data={"service": service, "operation": operation, "message": message},
            level="WARN",
            rid=rid,
        )

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def artifact_written(
        self,
        path: str,
        stage: str | None = None,
        bytes_written: int | None = None,
        record_count: int | None = None,
    ) -> None:
        """Record a file written by the run."""
        data: dict[str, Any] = {"path": path}
        if bytes_written is not None:
            data["bytes"] = bytes_written
        if record_count is not None:
            data["record_count"] = record_count
        self.event("artifact_written", data=data, stage=stage)
