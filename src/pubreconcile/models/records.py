"""Canonical publication record data models for pubreconcile.

Every component downstream of the source adapters consumes records in this
shape. Source-specific shapes live in ``pubreconcile.models.sources``.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from pubreconcile.models.sources import ExternalId


class SourceOrigin(str, Enum):
    """Provenance of a publication record."""

    PREPRINT = "preprint"
    PROFILE = "profile"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class ResearcherProfile:
    """Read-only roster entry for one internal researcher.

    Attributes
    ----------
    researcher_id : str
        Internal researcher identifier (roster key).
    name : str
        Canonical display name.
    name_variants : tuple[str, ...]
        Alternative spellings that normalize to ``name``.
    orcid : str | None
        ORCID iD used by the profile source.
    arxiv_author_id : str | None
        arXiv author identifier used by the preprint source.
    tenure_start : date | None
        First day of membership.
    tenure_end : date | None
        Last day of membership, None while still a member.
    status : str
        Membership status ("member" or "visitor").
    """

    researcher_id: str
    name: str
    name_variants: tuple[str, ...] = ()
    orcid: str | None = None
    arxiv_author_id: str | None = None
    tenure_start: date | None = None
    tenure_end: date | None = None
    status: str = "member"

    @property
    def is_visitor(self) -> bool:
        """True for visiting members."""
        return self.status == "visitor"

    @property
    def has_source_ids(self) -> bool:
        """True if at least one source identifier is configured."""
        return bool(self.orcid or self.arxiv_author_id)


@dataclass
class DerivedLinks:
    """URLs computed from a record's identifiers.

    Attributes
    ----------
    primary_source_url : str | None
        Abstract page on the preprint archive.
    primary_source_pdf_url : str | None
        PDF on the preprint archive.
    external_ref_url : str | None
        Resolver URL for the persistent identifier.
    """

    primary_source_url: str | None = None
    primary_source_pdf_url: str | None = None
    external_ref_url: str | None = None


@dataclass
class HighlightAnnotations:
    """Press coverage and awards attached to a publication."""

    coverage: list[Any] = field(default_factory=list)
    awards: list[Any] = field(default_factory=list)


@dataclass
class TransientPayload:
    """Raw provenance used only while enriching a record.

    Attributes
    ----------
    profile_owner_id : str | None
        Researcher whose profile produced the record.
    external_ids : tuple[ExternalId, ...]
        External identifiers listed on the profile work.
    contributors : tuple[str, ...]
        Contributor credit names listed on the profile work.
    citation_format : str | None
        Format tag of the embedded citation text.
    citation_value : str | None
        Embedded citation text.
    """

    profile_owner_id: str | None = None
    external_ids: tuple[ExternalId, ...] = ()
    contributors: tuple[str, ...] = ()
    citation_format: str | None = None
    citation_value: str | None = None

    def external_id(self, id_type: str) -> str | None:
        """Return the first external id value of the given type."""
        for ext in self.external_ids:
            if ext.id_type == id_type and ext.value:
                return ext.value
        return None


@dataclass
class PublicationRecord:
    """Canonical publication record.

    Records are created by a source adapter, may be discarded by duplicate
    suppression, are mutated in place by enrichment, and are terminal once
    finalized.

    Attributes
    ----------
    source_origin : SourceOrigin
        Source that produced the record.
    title : str
        Publication title (non-empty).
    persistent_id : str | None
        Normalized DOI.
    native_id : str | None
        Source-native accession, version suffix stripped.
    native_scheme : str | None
        Scheme of ``native_id`` (e.g. "arxiv").
    authors_raw : str | None
        Comma-joined display names.
    abstract_text : str | None
        Abstract.
    citation_ref : str | None
        Human-readable "journal vol(issue), pages (year)" reference.
    published_date : date | None
        First publication date.
    updated_date : date | None
        Last revision date.
    categories : list[str]
        Subject category tags.
    contributing_researcher_ids : set[str]
        Internal researchers credited with the record.
    derived_links : DerivedLinks
        Computed URLs.
    highlights : HighlightAnnotations | None
        Coverage and awards, attached after merging.
    transient : TransientPayload | None
        Internal provenance, dropped before output.
    arrival_index : int
        Ingestion order used for deterministic tie-breaks.
    """

    source_origin: SourceOrigin
    title: str
    persistent_id: str | None = None
    native_id: str | None = None
    native_scheme: str | None = None
    authors_raw: str | None = None
    abstract_text: str | None = None
    citation_ref: str | None = None
    published_date: date | None = None
    updated_date: date | None = None
    categories: list[str] = field(default_factory=list)
    contributing_researcher_ids: set[str] = field(default_factory=set)
    derived_links: DerivedLinks = field(default_factory=DerivedLinks)
    highlights: HighlightAnnotations | None = None
    transient: TransientPayload | None = None
    arrival_index: int = -1

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.title or not self.title.strip():
            raise ValueError("PublicationRecord requires a non-empty title")

    @property
    def has_authors(self) -> bool:
        """True if the author string is non-empty."""
        return bool(self.authors_raw and self.authors_raw.strip())

    @property
    def has_abstract(self) -> bool:
        """True if the abstract is non-empty."""
        return bool(self.abstract_text and self.abstract_text.strip())

    @property
    def has_citation_ref(self) -> bool:
        """True if the citation reference is non-empty."""
        return bool(self.citation_ref and self.citation_ref.strip())

    @property
    def first_author(self) -> str | None:
        """First name in the author string."""
        if not self.has_authors:
            return None
        return self.authors_raw.split(",")[0].strip() or None

    @property
    def label(self) -> str:
        """Short identifier for audit events."""
        if self.persistent_id:
            return f"doi:{self.persistent_id}"
        if self.native_id:
            return f"{self.native_scheme or 'native'}:{self.native_id}"
        return f"title:{self.title[:60]}"

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for JSON serialization.

        Transient provenance and the arrival index are never emitted.

        Returns
        -------
        dict[str, Any]
            Output representation.
        """
        data: dict[str, Any] = {
            "source_origin": self.source_origin.value,
            "title": self.title,
            "persistent_id": self.persistent_id,
            "native_id": self.native_id,
            "native_scheme": self.native_scheme,
            "authors": self.authors_raw,
            "abstract": self.abstract_text,
            "citation_ref": self.citation_ref,
            "published": self.published_date.isoformat() if self.published_date else None,
            "updated": self.updated_date.isoformat() if self.updated_date else None,
            "categories": list(self.categories),
            "contributing_researcher_ids": sorted(self.contributing_researcher_ids),
            "links": {
                "primary_source_url": self.derived_links.primary_source_url,
                "primary_source_pdf_url": self.derived_links.primary_source_pdf_url,
                "external_ref_url": self.derived_links.external_ref_url,
            },
        }
        if self.highlights is not None:
            if self.highlights.coverage:
                data["coverage"] = list(self.highlights.coverage)
            if self.highlights.awards:
                data["awards"] = list(self.highlights.awards)
        return data
