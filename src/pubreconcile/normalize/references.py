"""Journal reference standardization and formatting."""

import re
from collections.abc import Sequence

__all__ = ["ReferenceStandardizer", "format_citation_ref", "trailing_year"]

TRAILING_YEAR_RE = re.compile(r"\((\d{4})\)\s*$")


class ReferenceStandardizer:
    """Rewrite free-text journal references into abbreviated form.

    Two ordered passes run over the input. Pass 1 replaces every configured
    full journal name, case-insensitively, with its abbreviation. Pass 2
    applies each configured abbreviation-variant pattern, wrapped in word
    boundaries and matched case-insensitively, and substitutes the canonical
    abbreviation. Both passes follow table order and insert replacement text
    literally. Longer names must precede names they contain; the tables are
    not reordered here.

    Parameters
    ----------
    abbreviations : Sequence[tuple[str, str]]
        Ordered (full name, abbreviation) pairs.
    patterns : Sequence[tuple[str, str]]
        Ordered (regex pattern, canonical abbreviation) pairs.

    Raises
    ------
    re.error
        If a pattern is not a valid regular expression.

    Examples
    --------
    >>> std = ReferenceStandardizer(
    ...     [("Physical Review B", "Phys. Rev. B")],
    ...     [(r"Phys\\.?\\s*Rev\\.?\\s*B", "Phys. Rev. B")],
    ... )
    >>> std.standardize("Phys Rev B 109, 1 (2024)")
    'Phys. Rev. B 109, 1 (2024)'
    """

    def __init__(
        self,
        abbreviations: Sequence[tuple[str, str]],
        patterns: Sequence[tuple[str, str]],
    ) -> None:
        self._full_names = [
            (re.compile(re.escape(full), re.IGNORECASE), abbrev)
            for full, abbrev in abbreviations
            if full
        ]
        self._patterns = [
            (re.compile(rf"\b{pattern}\b", re.IGNORECASE), replacement)
            for pattern, replacement in patterns
            if pattern
        ]

    def standardize(self, text: str | None) -> str | None:
        """Standardize a journal reference.

        Parameters
        ----------
        text : str | None
            Free-text reference.

        Returns
        -------
        str | None
            Standardized reference, or the input unchanged when empty.
        """
        if not text:
            return text

        result = text
        for regex, abbrev in self._full_names:
            result = regex.sub(lambda _m, repl=abbrev: repl, result)
        for regex, replacement in self._patterns:
            result = regex.sub(lambda _m, repl=replacement: repl, result)
        return result


def format_citation_ref(
    container: str | None,
    volume: str | None = None,
    issue: str | None = None,
    pages: str | None = None,
    year: int | str | None = None,
) -> str | None:
    """Format "container vol(issue), pages (year)".

    Issue is only shown together with a volume. Without a container the
    result is "(year)" when a year is known, else None.
    """
    container = (container or "").strip()
    year_text = str(year).strip() if year is not None else ""

    if not container:
        return f"({year_text})" if year_text else None

    ref = container
    if volume:
        ref += f" {str(volume).strip()}"
        if issue:
            ref += f"({str(issue).strip()})"
    if pages:
        ref += f", {str(pages).strip()}"
    if year_text:
        ref += f" ({year_text})"
    return ref


def trailing_year(reference: str | None) -> int | None:
    """Return the year in a trailing "(YYYY)" group, if present."""
    if not reference:
        return None
    match = TRAILING_YEAR_RE.search(reference)
    return int(match.group(1)) if match else None
