"""Finalization and serialization of reconciled records."""

import json
from collections.abc import Iterable, Sequence
from pathlib import Path

from pubreconcile.config import ReconcileConfig
from pubreconcile.models.records import HighlightAnnotations, PublicationRecord
from pubreconcile.normalize.identifiers import build_derived_links

__all__ = ["finalize_records", "write_publications", "read_publications"]


def finalize_records(
    records: Iterable[PublicationRecord],
    config: ReconcileConfig,
) -> list[PublicationRecord]:
    """Prepare records for output, in place.

    Recomputes derived links, attaches highlight annotations keyed by
    persistent id and drops any remaining transient payload.

    Parameters
    ----------
    records : Iterable[PublicationRecord]
        Merged and enriched records.
    config : ReconcileConfig
        Run configuration holding the highlight table.

    Returns
    -------
    list[PublicationRecord]
        The same records, in input order.
    """
    finalized = []
    for record in records:
        record.derived_links = build_derived_links(
            record.persistent_id, record.native_id, record.native_scheme
        )

        entry = config.highlight_for(record.persistent_id)
        if entry is not None and (entry.coverage or entry.awards):
            record.highlights = HighlightAnnotations(
                coverage=list(entry.coverage),
                awards=list(entry.awards),
            )

        record.transient = None
        finalized.append(record)
    return finalized


def write_publications(records: Sequence[PublicationRecord], path: Path | str) -> int:
    """Write records as ``{"entries": [...]}`` JSON.

    Parameters
    ----------
    records : Sequence[PublicationRecord]
        Finalized records.
    path : Path | str
        Output file. Parent directories are created.

    Returns
    -------
    int
        Bytes written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(
        {"entries": [record.to_dict() for record in records]},
        indent=4,
        ensure_ascii=False,
    )
    data = (text + "\n").encode("utf-8")
    path.write_bytes(data)
    return len(data)


def read_publications(path: Path | str) -> list[dict]:
    """Read the entries of a publications file written by ``write_publications``."""
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f).get("entries", [])
