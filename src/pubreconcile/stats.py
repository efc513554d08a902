"""Summary statistics over a written publications file."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from pubreconcile.models.records import ResearcherProfile

__all__ = ["ResearcherCount", "PublicationStats", "compute_stats"]

TOP_CATEGORIES = 10


@dataclass(frozen=True)
class ResearcherCount:
    """Publications whose author string names one researcher."""

    name: str
    total: int
    published: int
    preprints: int


@dataclass
class PublicationStats:
    """Counts shown by ``pubreconcile stats``.

    Attributes
    ----------
    total : int
        Records in the file.
    with_persistent_id : int
        Records with a DOI.
    with_citation_ref : int
        Records with a journal reference.
    with_coverage : int
        Records with press coverage.
    with_awards : int
        Records with awards.
    per_researcher : list[ResearcherCount]
        Researchers named in at least one author string, in roster order.
    top_categories : list[tuple[str, int]]
        Most frequent categories, most frequent first.
    """

    total: int = 0
    with_persistent_id: int = 0
    with_citation_ref: int = 0
    with_coverage: int = 0
    with_awards: int = 0
    per_researcher: list[ResearcherCount] = field(default_factory=list)
    top_categories: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def _names_researcher(authors: str, researcher: ResearcherProfile) -> bool:
    lowered = authors.casefold()
    return any(
        name.casefold() in lowered for name in (researcher.name, *researcher.name_variants)
    )


def compute_stats(
    entries: Sequence[dict[str, Any]],
    roster: Sequence[ResearcherProfile],
    top: int = TOP_CATEGORIES,
) -> PublicationStats:
    """Summarize serialized publication entries.

    A researcher is counted for an entry when the canonical name or any
    variant appears in the author string, ignoring case. Entries with a
    journal reference count as published, the rest as preprints.

    Parameters
    ----------
    entries : Sequence[dict[str, Any]]
        Entries of a publications file.
    roster : Sequence[ResearcherProfile]
        Researchers to break down by.
    top : int, optional
        Number of categories to report.

    Returns
    -------
    PublicationStats
        Summary counts.
    """
    stats = PublicationStats(
        total=len(entries),
        with_persistent_id=sum(1 for e in entries if e.get("persistent_id")),
        with_citation_ref=sum(1 for e in entries if e.get("citation_ref")),
        with_coverage=sum(1 for e in entries if e.get("coverage")),
        with_awards=sum(1 for e in entries if e.get("awards")),
    )

    for researcher in roster:
        matched = [
            e for e in entries if e.get("authors") and _names_researcher(e["authors"], researcher)
        ]
        if not matched:
            continue
        published = sum(1 for e in matched if e.get("citation_ref"))
        stats.per_researcher.append(
            ResearcherCount(
                name=researcher.name,
                total=len(matched),
                published=published,
                preprints=len(matched) - published,
            )
        )

    categories: Counter[str] = Counter()
    for entry in entries:
        categories.update(entry.get("categories") or [])
    # Counter.most_common keeps first-seen order among equal counts
    stats.top_categories = categories.most_common(top)

    return stats
