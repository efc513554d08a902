"""Source-specific record shapes seen at the adapter boundary.

Each external API hands the core its own shape. These frozen dataclasses
give every shape an explicit type; only ``pubreconcile.adapters`` turns
them into ``PublicationRecord`` instances.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any

__all__ = [
    "ExternalId",
    "CitationText",
    "PreprintEntry",
    "ProfileWork",
    "CitationMetadata",
    "CitationCandidate",
    "CitationFields",
    "parse_date",
]


def parse_date(value: str | None) -> date | None:
    """Parse the date part of an ISO8601 string.

    Parameters
    ----------
    value : str | None
        Date or datetime string (e.g., "2024-03-01T12:00:00Z").

    Returns
    -------
    date | None
        Parsed date, or None if absent or malformed.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _orcid_value(node: Any) -> str | None:
    if isinstance(node, dict):
        value = node.get("value")
        return str(value) if value is not None else None
    return None


@dataclass(frozen=True)
class ExternalId:
    """External identifier listed on a profile work.

    Attributes
    ----------
    id_type : str
        Identifier type ("doi", "arxiv", "isbn", ...).
    value : str
        Identifier value as listed.
    """

    id_type: str
    value: str

    def to_dict(self) -> dict[str, str]:
        """Convert to the profile-source wire shape."""
        return {"external-id-type": self.id_type, "external-id-value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExternalId":
        """Create from the profile-source wire shape."""
        return cls(
            id_type=str(data.get("external-id-type") or "").lower(),
            value=str(data.get("external-id-value") or "").strip(),
        )


@dataclass(frozen=True)
class CitationText:
    """Raw citation text embedded in a profile work."""

    format: str
    value: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"type": self.format, "value": self.value}


@dataclass(frozen=True)
class PreprintEntry:
    """Entry from the preprint archive (author feed or query API).

    Attributes
    ----------
    entry_id : str
        Abstract-page URL, e.g. "http://arxiv.org/abs/2101.00001v2".
    title : str
        Entry title.
    summary : str | None
        Abstract.
    authors : str | None
        Comma-joined author names.
    published : str | None
        First-version timestamp.
    updated : str | None
        Latest-version timestamp.
    categories : tuple[str, ...]
        Subject categories.
    doi : str | None
        DOI as listed by the archive.
    journal_ref : str | None
        Journal reference as listed by the archive.
    """

    entry_id: str
    title: str
    summary: str | None = None
    authors: str | None = None
    published: str | None = None
    updated: str | None = None
    categories: tuple[str, ...] = ()
    doi: str | None = None
    journal_ref: str | None = None

    @property
    def published_on(self) -> date | None:
        """Publication date used by the tenure filter."""
        return parse_date(self.published)

    @property
    def reference_text(self) -> str | None:
        """Citation text used by the tenure filter."""
        return self.journal_ref

    def to_dict(self) -> dict[str, Any]:
        """Convert to the author-feed entry shape."""
        return {
            "id": self.entry_id,
            "title": self.title,
            "summary": self.summary,
            "authors": self.authors,
            "published": self.published,
            "updated": self.updated,
            "categories": list(self.categories),
            "doi": self.doi,
            "journal_ref": self.journal_ref,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PreprintEntry":
        """Create from an author-feed entry.

        Parameters
        ----------
        data : dict[str, Any]
            Feed entry. ``categories`` may be a list of strings or of
            ``{"term": ...}`` objects.

        Returns
        -------
        PreprintEntry
            Typed entry.
        """
        categories: list[str] = []
        for cat in data.get("categories") or []:
            term = cat.get("term") if isinstance(cat, dict) else cat
            if term:
                categories.append(str(term))

        authors = data.get("authors")
        if isinstance(authors, list):
            authors = ", ".join(str(a) for a in authors if a)

        return cls(
            entry_id=str(data.get("id") or ""),
            title=" ".join(str(data.get("title") or "").split()),
            summary=" ".join(str(data["summary"]).split()) if data.get("summary") else None,
            authors=authors or None,
            published=data.get("published") or None,
            updated=data.get("updated") or None,
            categories=tuple(categories),
            doi=data.get("doi") or None,
            journal_ref=data.get("journal_ref") or None,
        )


@dataclass(frozen=True)
class ProfileWork:
    """Work summary from the author-profile source.

    Attributes
    ----------
    title : str
        Work title.
    publication_date : date | None
        Publication date, month and day defaulting to 1.
    external_ids : tuple[ExternalId, ...]
        External identifiers.
    put_code : str | None
        Profile-source work key, used to fetch the full work.
    journal_title : str | None
        Venue name when listed.
    contributors : tuple[str, ...]
        Contributor credit names (full work only).
    citation : CitationText | None
        Embedded citation (full work only).
    """

    title: str
    publication_date: date | None = None
    external_ids: tuple[ExternalId, ...] = ()
    put_code: str | None = None
    journal_title: str | None = None
    contributors: tuple[str, ...] = ()
    citation: CitationText | None = None

    @property
    def published_on(self) -> date | None:
        """Publication date used by the tenure filter."""
        return self.publication_date

    @property
    def reference_text(self) -> str | None:
        """Citation text used by the tenure filter."""
        return self.journal_title

    def external_id(self, id_type: str) -> str | None:
        """Return the first external id value of the given type."""
        for ext in self.external_ids:
            if ext.id_type == id_type and ext.value:
                return ext.value
        return None

    @property
    def has_strong_id(self) -> bool:
        """True if the work lists a DOI or arXiv id."""
        return bool(self.external_id("doi") or self.external_id("arxiv"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the cached profile-source shape."""
        pub_date = None
        if self.publication_date is not None:
            pub_date = {
                "year": {"value": f"{self.publication_date.year:04d}"},
                "month": {"value": f"{self.publication_date.month:02d}"},
                "day": {"value": f"{self.publication_date.day:02d}"},
            }
        return {
            "title": self.title,
            "publication-date": pub_date,
            "external-ids": [ext.to_dict() for ext in self.external_ids],
            "put-code": self.put_code,
            "journal-title": self.journal_title,
            "contributors": list(self.contributors),
            "citation": self.citation.to_dict() if self.citation else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProfileWork":
        """Create from a cached or summarized profile-source work.

        Parameters
        ----------
        data : dict[str, Any]
            Work dictionary. Title and date fields may be given either flat
            or nested in the profile-source ``{"value": ...}`` style.

        Returns
        -------
        ProfileWork
            Typed work.
        """
        title = data.get("title")
        if isinstance(title, dict):
            title = _orcid_value(title.get("title"))

        external = data.get("external-ids") or []
        if isinstance(external, dict):
            external = external.get("external-id") or []

        journal = data.get("journal-title")
        if isinstance(journal, dict):
            journal = _orcid_value(journal)

        citation = None
        raw_citation = data.get("citation")
        if isinstance(raw_citation, dict):
            value = raw_citation.get("value") or raw_citation.get("citation-value")
            fmt = raw_citation.get("type") or raw_citation.get("citation-type") or ""
            if value:
                citation = CitationText(format=str(fmt).lower(), value=str(value))

        put_code = data.get("put-code")
        return cls(
            title=" ".join(str(title or "").split()),
            publication_date=_parse_profile_date(data.get("publication-date")),
            external_ids=tuple(ExternalId.from_dict(e) for e in external if isinstance(e, dict)),
            put_code=str(put_code) if put_code is not None else None,
            journal_title=journal or None,
            contributors=tuple(str(c) for c in data.get("contributors") or [] if c),
            citation=citation,
        )


def _parse_profile_date(node: Any) -> date | None:
    if not isinstance(node, dict):
        return None
    year = _orcid_value(node.get("year"))
    if not year:
        return None
    month = _orcid_value(node.get("month")) or "1"
    day = _orcid_value(node.get("day")) or "1"
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


@dataclass(frozen=True)
class CitationMetadata:
    """Point-lookup result from the citation-metadata source.

    Attributes
    ----------
    persistent_id : str | None
        DOI of the work.
    authors : str | None
        Comma-joined author names.
    abstract : str | None
        Plain-text abstract.
    container_title : str | None
        Journal or book title.
    volume, issue, pages : str | None
        Locator fields.
    year : int | None
        Issue year.
    work_type : str | None
        Work type ("journal-article", "book-chapter", ...).
    """

    persistent_id: str | None = None
    authors: str | None = None
    abstract: str | None = None
    container_title: str | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    year: int | None = None
    work_type: str | None = None


@dataclass(frozen=True)
class CitationCandidate:
    """Search hit from the citation-metadata source."""

    title: str
    persistent_id: str | None = None
    authors: str | None = None
    abstract: str | None = None
    citation_ref: str | None = None


@dataclass(frozen=True)
class CitationFields:
    """Fields extracted from embedded citation text."""

    authors: str | None = None
    citation_ref: str | None = None
    persistent_id: str | None = None

    @property
    def is_empty(self) -> bool:
        """True if nothing was extracted."""
        return not (self.authors or self.citation_ref or self.persistent_id)
