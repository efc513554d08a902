"""Collaborator interfaces used by enrichment.

Concrete implementations live in ``pubreconcile.clients``; tests supply
in-memory fakes.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pubreconcile.models.sources import CitationCandidate, CitationMetadata, PreprintEntry

__all__ = ["CitationMetadataSource", "PreprintSearch", "EnrichmentServices"]


@runtime_checkable
class CitationMetadataSource(Protocol):
    """Citation-metadata source (point lookup and fuzzy search)."""

    name: str

    async def lookup_by_id(self, persistent_id: str) -> CitationMetadata | None:
        """Fetch structured metadata for one DOI."""
        ...

    async def search_by_title_author(
        self, title: str, surname: str
    ) -> list[CitationCandidate]:
        """Search works by title and author surname, best hits first."""
        ...


@runtime_checkable
class PreprintSearch(Protocol):
    """Preprint-archive search."""

    name: str

    async def search_by_title_author(self, title: str, first_author: str) -> PreprintEntry | None:
        """Return the top archive hit for a title and first author."""
        ...

    async def find_by_persistent_id(self, persistent_id: str) -> str | None:
        """Return the archive accession listing the given DOI."""
        ...

    async def fetch_by_native_id(self, native_id: str) -> PreprintEntry | None:
        """Return the archive entry for one accession."""
        ...


@dataclass(frozen=True)
class EnrichmentServices:
    """Collaborators available to the enricher.

    Either service may be None (offline runs); steps that need it then
    find nothing.
    """

    citation_source: CitationMetadataSource | None = None
    preprint_source: PreprintSearch | None = None

    @property
    def offline(self) -> bool:
        """True when no collaborator is configured."""
        return self.citation_source is None and self.preprint_source is None
