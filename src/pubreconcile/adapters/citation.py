"""Adapter for citation-metadata lookups and search hits."""

from pubreconcile.models.records import PublicationRecord, SourceOrigin
from pubreconcile.models.sources import CitationCandidate, CitationMetadata
from pubreconcile.normalize.identifiers import normalize_persistent_id
from pubreconcile.normalize.references import format_citation_ref

__all__ = ["BOOK_WORK_TYPES", "candidate_record", "infer_citation_ref"]

BOOK_WORK_TYPES = frozenset({"book", "book-chapter", "monograph", "edited-book"})


def candidate_record(candidate: CitationCandidate) -> PublicationRecord | None:
    """Convert a search hit into a synthetic canonical record.

    Synthetic records never enter the merge; enrichment reads fields from
    them.
    """
    if not candidate.title.strip():
        return None
    return PublicationRecord(
        source_origin=SourceOrigin.SYNTHETIC,
        title=candidate.title.strip(),
        persistent_id=normalize_persistent_id(candidate.persistent_id),
        authors_raw=candidate.authors or None,
        abstract_text=candidate.abstract or None,
        citation_ref=candidate.citation_ref or None,
    )


def infer_citation_ref(metadata: CitationMetadata, isbn: str | None = None) -> str | None:
    """Build a journal reference from a point-lookup result.

    Book-type works with a known ISBN get "ISBN: <isbn>". Other works get
    "container vol(issue), pages (year)" when a container title is known.

    Parameters
    ----------
    metadata : CitationMetadata
        Point-lookup result.
    isbn : str | None, optional
        ISBN listed on the originating profile work.

    Returns
    -------
    str | None
        Inferred reference, None when nothing usable is known.
    """
    if isbn and metadata.work_type in BOOK_WORK_TYPES:
        return f"ISBN: {isbn}"
    if not metadata.container_title:
        return None
    return format_citation_ref(
        metadata.container_title,
        volume=metadata.volume,
        issue=metadata.issue,
        pages=metadata.pages,
        year=metadata.year,
    )
