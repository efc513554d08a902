"""Word-overlap title similarity for fuzzy citation search."""

import re
from collections.abc import Sequence

from pubreconcile.config import DEFAULT_TITLE_THRESHOLD
from pubreconcile.models.sources import CitationCandidate

__all__ = [
    "DEFAULT_TITLE_THRESHOLD",
    "clean_title",
    "significant_words",
    "title_overlap_score",
    "is_accepted",
    "best_candidate",
]

MIN_SIGNIFICANT_LENGTH = 4

_PUNCT_RE = re.compile(r"[^\w\s]")


def clean_title(title: str | None) -> str:
    """Lowercase, replace punctuation with spaces, collapse whitespace."""
    if not title:
        return ""
    return " ".join(_PUNCT_RE.sub(" ", title.lower()).split())


def significant_words(title: str | None) -> list[str]:
    """Words of a cleaned title longer than three characters."""
    return [w for w in clean_title(title).split() if len(w) >= MIN_SIGNIFICANT_LENGTH]


def title_overlap_score(searched: str | None, candidate: str | None) -> float:
    """Fraction of the searched title's significant words found in the candidate.

    Parameters
    ----------
    searched : str | None
        Title that was searched for.
    candidate : str | None
        Title of a search hit.

    Returns
    -------
    float
        Score in [0, 1]; 0.0 when the searched title has no significant words.

    Examples
    --------
    >>> title_overlap_score("Quantum dynamics of open systems", "Open quantum systems")
    0.75
    """
    words = significant_words(searched)
    if not words:
        return 0.0
    candidate_words = set(clean_title(candidate).split())
    matched = sum(1 for w in words if w in candidate_words)
    return matched / len(words)


def is_accepted(score: float, threshold: float = DEFAULT_TITLE_THRESHOLD) -> bool:
    """Acceptance rule: strictly greater than the threshold."""
    return score > threshold


def best_candidate(
    title: str,
    candidates: Sequence[CitationCandidate],
    threshold: float = DEFAULT_TITLE_THRESHOLD,
) -> tuple[CitationCandidate | None, float]:
    """Pick the highest-scoring candidate whose score is strictly above threshold.

    Parameters
    ----------
    title : str
        Searched title.
    candidates : Sequence[CitationCandidate]
        Search hits in relevance order; earlier hits win ties.
    threshold : float, optional
        Acceptance threshold, compared with ``>``.

    Returns
    -------
    tuple[CitationCandidate | None, float]
        Accepted candidate (or None) and its score (0.0 if none).
    """
    best: CitationCandidate | None = None
    best_score = 0.0
    for candidate in candidates:
        score = title_overlap_score(title, candidate.title)
        if is_accepted(score, threshold) and score > best_score:
            best = candidate
            best_score = score
    return best, best_score
