"""Author-name normalization against the researcher roster."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pubreconcile.models.records import ResearcherProfile

__all__ = [
    "NameNormalizer",
    "build_variant_map",
    "split_authors",
    "join_authors",
    "researchers_named_in",
]


def split_authors(authors: str | None) -> list[str]:
    """Split a comma-joined author string into trimmed, non-empty names."""
    if not authors:
        return []
    return [name.strip() for name in authors.split(",") if name.strip()]


def join_authors(names: Iterable[str]) -> str:
    """Join names with ", "."""
    return ", ".join(names)


def build_variant_map(roster: Iterable[ResearcherProfile]) -> Mapping[str, str]:
    """Map every canonical name and registered variant to its canonical name.

    Parameters
    ----------
    roster : Iterable[ResearcherProfile]
        Researcher roster.

    Returns
    -------
    Mapping[str, str]
        Read-only variant map. Keys are matched case-sensitively.
    """
    variants: dict[str, str] = {}
    for researcher in roster:
        variants[researcher.name] = researcher.name
        for variant in researcher.name_variants:
            variants[variant] = researcher.name
    return MappingProxyType(variants)


class NameNormalizer:
    """Replace registered author-name variants by canonical names.

    Matching is exact and case-sensitive; names with no registered variant
    pass through unchanged and author order is preserved.

    Parameters
    ----------
    variant_map : Mapping[str, str]
        Variant to canonical name map, see ``build_variant_map``.

    Examples
    --------
    >>> normalizer = NameNormalizer({"J. Smith": "John Smith"})
    >>> normalizer.normalize("J. Smith, A. Jones")
    'John Smith, A. Jones'
    """

    def __init__(self, variant_map: Mapping[str, str]) -> None:
        self._variants = variant_map

    def normalize(self, authors: str | None) -> str | None:
        """Normalize a comma-joined author string.

        Parameters
        ----------
        authors : str | None
            Author string.

        Returns
        -------
        str | None
            Normalized string, None when the input has no names.
        """
        names = split_authors(authors)
        if not names:
            return None
        return join_authors(self._variants.get(name, name) for name in names)


def researchers_named_in(
    authors: str | None,
    roster: Iterable[ResearcherProfile],
) -> set[str]:
    """Return ids of researchers whose canonical name occurs in ``authors``.

    The test is a plain substring match against the normalized author
    string, so it should run after ``NameNormalizer.normalize``.
    """
    if not authors:
        return set()
    return {r.researcher_id for r in roster if r.name and r.name in authors}
