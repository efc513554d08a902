"""Adapter for preprint-archive entries."""

from collections.abc import Iterable

from pubreconcile.models.records import PublicationRecord, SourceOrigin
from pubreconcile.models.sources import PreprintEntry, parse_date
from pubreconcile.normalize.identifiers import (
    ARXIV_SCHEME,
    arxiv_id_from_url,
    normalize_native_id,
    normalize_persistent_id,
)

__all__ = ["preprint_record", "adapt_preprint_entries"]


def preprint_record(
    entry: PreprintEntry,
    researcher_id: str | None = None,
) -> PublicationRecord | None:
    """Convert one archive entry into a canonical record.

    Parameters
    ----------
    entry : PreprintEntry
        Archive entry.
    researcher_id : str | None, optional
        Researcher whose feed listed the entry. None for entries found by
        enrichment searches.

    Returns
    -------
    PublicationRecord | None
        Canonical record, or None when the entry has no title.
    """
    if not entry.title.strip():
        return None

    native_id = arxiv_id_from_url(entry.entry_id) or normalize_native_id(entry.entry_id or None)

    return PublicationRecord(
        source_origin=SourceOrigin.PREPRINT,
        title=entry.title.strip(),
        persistent_id=normalize_persistent_id(entry.doi),
        native_id=native_id,
        native_scheme=ARXIV_SCHEME if native_id else None,
        authors_raw=entry.authors or None,
        abstract_text=entry.summary or None,
        citation_ref=entry.journal_ref or None,
        published_date=parse_date(entry.published),
        updated_date=parse_date(entry.updated),
        categories=list(entry.categories),
        contributing_researcher_ids={researcher_id} if researcher_id else set(),
    )


def adapt_preprint_entries(
    entries: Iterable[PreprintEntry],
    researcher_id: str,
) -> list[PublicationRecord]:
    """Convert a researcher's archive entries, dropping untitled ones."""
    records = []
    for entry in entries:
        record = preprint_record(entry, researcher_id)
        if record is not None:
            records.append(record)
    return records
