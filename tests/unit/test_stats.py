"""Tests for publication statistics."""

import pytest

from pubreconcile.models import ResearcherProfile
from pubreconcile.stats import ResearcherCount, compute_stats

ENTRIES = [
    {
        "title": "A",
        "authors": "Alice Smith, Bob Jones",
        "persistent_id": "10.1000/a",
        "citation_ref": "Phys. Rev. B 1, 2 (2021)",
        "categories": ["cond-mat", "quant-ph"],
        "coverage": [{"outlet": "News"}],
    },
    {
        "title": "B",
        "authors": "A. SMITH, Carol White",
        "persistent_id": None,
        "citation_ref": None,
        "categories": ["quant-ph"],
        "awards": ["Best paper"],
    },
    {
        "title": "C",
        "authors": None,
        "persistent_id": "10.1000/c",
        "citation_ref": None,
        "categories": ["physics.optics"],
    },
]


@pytest.mark.unit
def test_compute_stats_totals(roster: tuple[ResearcherProfile, ...]) -> None:
    """Test file-level counts."""
    stats = compute_stats(ENTRIES, roster)

    assert stats.total == 3
    assert stats.with_persistent_id == 2
    assert stats.with_citation_ref == 1
    assert stats.with_coverage == 1
    assert stats.with_awards == 1


@pytest.mark.unit
def test_compute_stats_per_researcher(roster: tuple[ResearcherProfile, ...]) -> None:
    """Test researchers are matched by name or variant, ignoring case."""
    stats = compute_stats(ENTRIES, roster)

    assert stats.per_researcher == [
        ResearcherCount(name="Alice Smith", total=2, published=1, preprints=1),
        ResearcherCount(name="Bob Jones", total=1, published=1, preprints=0),
    ]


@pytest.mark.unit
def test_compute_stats_top_categories(roster: tuple[ResearcherProfile, ...]) -> None:
    """Test categories are ranked by count, first seen first on ties."""
    stats = compute_stats(ENTRIES, roster, top=2)

    assert stats.top_categories == [("quant-ph", 2), ("cond-mat", 1)]


@pytest.mark.unit
def test_compute_stats_empty() -> None:
    """Test an empty file summarizes to zeros."""
    stats = compute_stats([], ())

    assert stats.to_dict() == {
        "total": 0,
        "with_persistent_id": 0,
        "with_citation_ref": 0,
        "with_coverage": 0,
        "with_awards": 0,
        "per_researcher": [],
        "top_categories": [],
    }
