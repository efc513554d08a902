"""Pytest configuration and fixtures for test suite."""

import json
import sys
from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from pubreconcile.config import ReconcileConfig  # noqa: E402
from pubreconcile.models import (  # noqa: E402
    PublicationRecord,
    ResearcherProfile,
    SourceOrigin,
    TransientPayload,
)
from pubreconcile.models.sources import (  # noqa: E402
    CitationCandidate,
    CitationMetadata,
    ExternalId,
    PreprintEntry,
    ProfileWork,
)
from pubreconcile.sources.cache import (  # noqa: E402
    PREPRINT_CACHE_FILE,
    PROFILE_CACHE_FILE,
    write_source_cache,
)

BASICS = {
    "alice": {
        "name": "Alice Smith",
        "name_variants": ["A. Smith", "Alice M. Smith"],
        "orcid": "0000-0001-0000-0001",
        "arxiv_authorid": "smith_a_1",
        "date_in": "2020-01-01",
    },
    "bob": {
        "name": "Bob Jones",
        "name_variants": ["B. Jones", "R. Jones"],
        "orcid": "0000-0002-0000-0002",
        "date_in": "2021-01-01",
    },
}

ABBREVIATIONS = {"Physical Review B": "Phys. Rev. B", "Nature Physics": "Nat. Phys."}

PATTERNS = {r"Phys\.?\s*Rev\.?\s*B": "Phys. Rev. B"}

HIGHLIGHTS = {
    "entries": [
        {
            "doi": "10.1000/highlight",
            "coverage": [{"outlet": "Science News", "url": "https://example.org/n"}],
            "awards": [],
        }
    ]
}


@pytest.fixture
def make_record() -> Callable[..., PublicationRecord]:
    """Factory for test records with minimal boilerplate.

    ``native_id`` defaults to the arXiv scheme; pass ``owner`` to attach a
    profile-style transient payload.
    """

    def _factory(
        title: str = "Quantum dynamics of open systems",
        *,
        origin: SourceOrigin = SourceOrigin.PREPRINT,
        persistent_id: str | None = None,
        native_id: str | None = None,
        native_scheme: str | None = None,
        authors: str | None = None,
        abstract: str | None = None,
        citation_ref: str | None = None,
        published: date | None = None,
        categories: list[str] | None = None,
        contributors: set[str] | None = None,
        owner: str | None = None,
        credit_names: tuple[str, ...] = (),
        citation_format: str | None = None,
        citation_value: str | None = None,
    ) -> PublicationRecord:
        transient = None
        if owner or credit_names or citation_value:
            transient = TransientPayload(
                profile_owner_id=owner,
                contributors=credit_names,
                citation_format=citation_format,
                citation_value=citation_value,
            )
        return PublicationRecord(
            source_origin=origin,
            title=title,
            persistent_id=persistent_id,
            native_id=native_id,
            native_scheme=native_scheme or ("arxiv" if native_id else None),
            authors_raw=authors,
            abstract_text=abstract,
            citation_ref=citation_ref,
            published_date=published,
            updated_date=published,
            categories=list(categories or []),
            contributing_researcher_ids=set(contributors or ()),
            transient=transient,
        )

    return _factory


@pytest.fixture
def roster() -> tuple[ResearcherProfile, ...]:
    """Two-member roster used across tests."""
    return (
        ResearcherProfile(
            researcher_id="alice",
            name="Alice Smith",
            name_variants=("A. Smith", "Alice M. Smith"),
            orcid="0000-0001-0000-0001",
            arxiv_author_id="smith_a_1",
            tenure_start=date(2020, 1, 1),
        ),
        ResearcherProfile(
            researcher_id="bob",
            name="Bob Jones",
            name_variants=("B. Jones", "R. Jones"),
            orcid="0000-0002-0000-0002",
            tenure_start=date(2021, 1, 1),
        ),
    )


@pytest.fixture
def reconcile_config() -> ReconcileConfig:
    """Validated configuration built from the module-level JSON documents."""
    return ReconcileConfig.from_mappings(
        BASICS,
        ABBREVIATIONS,
        PATTERNS,
        HIGHLIGHTS,
        {"access_token": "test-token"},
    )


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeCitationSource:
    """Citation-metadata source backed by dictionaries."""

    name = "crossref"

    def __init__(
        self,
        metadata: dict[str, CitationMetadata] | None = None,
        candidates: list[CitationCandidate] | None = None,
        fail: bool = False,
    ) -> None:
        self.metadata = metadata or {}
        self.candidates = candidates or []
        self.fail = fail
        self.lookups: list[str] = []
        self.searches: list[tuple[str, str]] = []

    async def lookup_by_id(self, persistent_id: str) -> CitationMetadata | None:
        self.lookups.append(persistent_id)
        if self.fail:
            raise RuntimeError("service down")
        return self.metadata.get(persistent_id)

    async def search_by_title_author(self, title: str, surname: str) -> list[CitationCandidate]:
        self.searches.append((title, surname))
        if self.fail:
            raise RuntimeError("service down")
        return list(self.candidates)


class FakePreprintSearch:
    """Preprint-archive search backed by dictionaries."""

    name = "arxiv"

    def __init__(
        self,
        by_title: dict[str, PreprintEntry] | None = None,
        by_pid: dict[str, str] | None = None,
        by_native_id: dict[str, PreprintEntry] | None = None,
    ) -> None:
        self.by_title = by_title or {}
        self.by_pid = by_pid or {}
        self.by_native_id = by_native_id or {}
        self.searches: list[tuple[str, str]] = []
        self.pid_lookups: list[str] = []
        self.native_lookups: list[str] = []

    async def search_by_title_author(self, title: str, first_author: str) -> PreprintEntry | None:
        self.searches.append((title, first_author))
        return self.by_title.get(title)

    async def find_by_persistent_id(self, persistent_id: str) -> str | None:
        self.pid_lookups.append(persistent_id)
        return self.by_pid.get(persistent_id)

    async def fetch_by_native_id(self, native_id: str) -> PreprintEntry | None:
        self.native_lookups.append(native_id)
        return self.by_native_id.get(native_id)


@pytest.fixture
def make_citation_source() -> Callable[..., FakeCitationSource]:
    """Factory for in-memory citation-metadata sources."""
    return FakeCitationSource


@pytest.fixture
def make_preprint_search() -> Callable[..., FakePreprintSearch]:
    """Factory for in-memory preprint searches."""
    return FakePreprintSearch


# ---------------------------------------------------------------------------
# On-disk workspace
# ---------------------------------------------------------------------------

CACHED_PREPRINTS = {
    "alice": [
        PreprintEntry(
            entry_id="http://arxiv.org/abs/2101.00001v1",
            title="Spin waves in thin films",
            summary="We study spin waves in thin magnetic films.",
            authors="Alice Smith, B. Jones",
            published="2021-02-01T00:00:00Z",
            categories=("cond-mat.mes-hall",),
            doi="10.1000/HIGHLIGHT",
            journal_ref="Physical Review B 1, 2 (2021)",
        ),
        PreprintEntry(
            entry_id="http://arxiv.org/abs/2103.00002v2",
            title="Magnon lifetimes",
            authors="A. Smith",
            published="2021-03-01T00:00:00Z",
            categories=("cond-mat.mes-hall", "quant-ph"),
        ),
    ]
}

CACHED_WORKS = {
    "bob": [
        ProfileWork(
            title="Spin waves in thin films",
            publication_date=date(2021, 5, 1),
            external_ids=(ExternalId("doi", "https://doi.org/10.1000/highlight"),),
            put_code="21",
            journal_title="Physical Review B",
        ),
        ProfileWork(
            title="Heat transport in oxides",
            publication_date=date(2022, 1, 1),
            put_code="22",
            journal_title="Nature Physics",
        ),
    ]
}


@pytest.fixture
def workspace(tmp_path: Path, roster: tuple[ResearcherProfile, ...]) -> tuple[Path, Path]:
    """Config directory and data directory with both source caches filled.

    The caches hold four entries describing three publications: the first
    preprint and the first profile work share a DOI.
    """
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    config_dir.mkdir()

    documents = {
        "basics.json": BASICS,
        "journal_abbreviations.json": ABBREVIATIONS,
        "journal_normalization_patterns.json": PATTERNS,
        "highlights.json": HIGHLIGHTS,
        "orcid_oauth.json": {"access_token": "test-token"},
    }
    for name, content in documents.items():
        (config_dir / name).write_text(json.dumps(content), encoding="utf-8")

    write_source_cache(data_dir / PREPRINT_CACHE_FILE, roster, CACHED_PREPRINTS)
    write_source_cache(data_dir / PROFILE_CACHE_FILE, roster, CACHED_WORKS)
    return config_dir, data_dir
