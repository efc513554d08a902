"""Tenure predicate deciding which fetched entries belong to a researcher."""

from datetime import date

from pubreconcile.models.records import ResearcherProfile
from pubreconcile.normalize.references import trailing_year
from pubreconcile.utils.timestamps import today_utc

__all__ = ["should_include_publication"]


def should_include_publication(
    published: date | None,
    researcher: ResearcherProfile,
    citation_ref: str | None = None,
    today: date | None = None,
) -> bool:
    """Decide whether a publication falls within a researcher's tenure.

    Rules:

    - Entries without a publication date are excluded.
    - Non-visitors without an end date: every publication is included.
    - Otherwise the date must lie within [tenure_start, tenure_end]; an
      open end means today. Without a start date nothing is included.
    - A citation reference ending in ``(YYYY)`` with a year before the
      tenure start year excludes the entry even when the preprint date
      falls inside the window.

    Parameters
    ----------
    published : date | None
        Publication date of the entry.
    researcher : ResearcherProfile
        Roster entry.
    citation_ref : str | None, optional
        Journal reference of the entry, if listed.
    today : date | None, optional
        Reference date for open-ended windows. Defaults to today (UTC).

    Returns
    -------
    bool
        True if the entry should be kept.

    Examples
    --------
    >>> r = ResearcherProfile("r1", "A. Author", tenure_start=date(2024, 1, 1),
    ...                       tenure_end=date(2024, 12, 31))
    >>> should_include_publication(date(2024, 6, 1), r)
    True
    >>> should_include_publication(date(2024, 6, 1), r, "Phys. Rev. B 1, 2 (2023)")
    False
    """
    if published is None:
        return False

    if not researcher.is_visitor and researcher.tenure_end is None:
        return True

    if researcher.tenure_start is None:
        return False

    end = researcher.tenure_end or today or today_utc()
    if not researcher.tenure_start <= published <= end:
        return False

    year = trailing_year(citation_ref)
    if year is not None and year < researcher.tenure_start.year:
        return False
    return True
