"""Adapter for author-profile works."""

from collections.abc import Iterable

from pubreconcile.models.records import PublicationRecord, SourceOrigin, TransientPayload
from pubreconcile.models.sources import ProfileWork
from pubreconcile.normalize.identifiers import (
    ARXIV_SCHEME,
    normalize_native_id,
    normalize_persistent_id,
)

__all__ = ["profile_record", "adapt_profile_works"]


def profile_record(work: ProfileWork, researcher_id: str) -> PublicationRecord | None:
    """Convert one profile work into a canonical record.

    Profile works carry no author list. The owning researcher, contributor
    credit names and embedded citation text are kept in the transient
    payload for enrichment.

    Parameters
    ----------
    work : ProfileWork
        Work from the profile source.
    researcher_id : str
        Researcher whose profile lists the work.

    Returns
    -------
    PublicationRecord | None
        Canonical record, or None when the work has no title.
    """
    if not work.title.strip():
        return None

    native_id = normalize_native_id(work.external_id("arxiv"))

    return PublicationRecord(
        source_origin=SourceOrigin.PROFILE,
        title=work.title.strip(),
        persistent_id=normalize_persistent_id(work.external_id("doi")),
        native_id=native_id,
        native_scheme=ARXIV_SCHEME if native_id else None,
        citation_ref=work.journal_title or None,
        published_date=work.publication_date,
        updated_date=work.publication_date,
        contributing_researcher_ids={researcher_id},
        transient=TransientPayload(
            profile_owner_id=researcher_id,
            external_ids=work.external_ids,
            contributors=work.contributors,
            citation_format=work.citation.format if work.citation else None,
            citation_value=work.citation.value if work.citation else None,
        ),
    )


def adapt_profile_works(
    works: Iterable[ProfileWork],
    researcher_id: str,
) -> list[PublicationRecord]:
    """Convert a researcher's profile works, dropping untitled ones."""
    records = []
    for work in works:
        record = profile_record(work, researcher_id)
        if record is not None:
            records.append(record)
    return records
