"""Survivor selection for duplicate groups."""

from collections.abc import Sequence

from pubreconcile.models.records import PublicationRecord
from pubreconcile.normalize.identifiers import ARXIV_SCHEME


def has_primary_source_id(record: PublicationRecord) -> bool:
    """True if the record carries a preprint-archive accession."""
    return bool(record.native_id) and record.native_scheme == ARXIV_SCHEME


def is_complete(record: PublicationRecord) -> bool:
    """Completeness criterion used to pick survivors.

    A record is complete when it has an abstract or a citation reference
    and either a primary-source id or a non-empty author list.
    """
    has_content = record.has_abstract or record.has_citation_ref
    has_provenance = has_primary_source_id(record) or record.has_authors
    return has_content and has_provenance


def select_survivor(records: Sequence[PublicationRecord]) -> PublicationRecord:
    """Select the record that represents a duplicate group.

    The earliest-arriving complete record wins. When no member is
    complete the earliest arrival wins, whatever partial content the
    later members carry.

    Parameters
    ----------
    records : Sequence[PublicationRecord]
        Group members.

    Returns
    -------
    PublicationRecord
        Survivor.

    Raises
    ------
    ValueError
        If records is empty.
    """
    if not records:
        raise ValueError("Cannot select survivor from empty records list")

    def ranking_key(item: tuple[int, PublicationRecord]) -> tuple[bool, int, int]:
        position, record = item
        # Complete records first, then arrival order
        return (not is_complete(record), record.arrival_index, position)

    return min(enumerate(records), key=ranking_key)[1]
