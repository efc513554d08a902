"""Identifier, title, and link normalization helpers.

Pre-compiled patterns live at module level so identity checks on every
record pair stay cheap.
"""

import re
import unicodedata
from urllib.parse import unquote, urlparse

from pubreconcile.models.records import DerivedLinks

__all__ = [
    "ARXIV_SCHEME",
    "normalize_persistent_id",
    "normalize_native_id",
    "arxiv_id_from_url",
    "find_doi_token",
    "normalize_title",
    "build_derived_links",
]

ARXIV_SCHEME = "arxiv"

DOI_TOKEN_RE = re.compile(r"\b(10\.\d{4,9}/[^\s,;\"'<>]+)")
VERSION_SUFFIX_RE = re.compile(r"v\d+$")
ARXIV_ABS_RE = re.compile(r"arxiv\.org/(?:abs|pdf)/([^\s?#]+?)(?:\.pdf)?$", re.IGNORECASE)
NON_WORD_RE = re.compile(r"[^\w\s]+")

_DOI_PREFIXES = ("doi:", "doi.org/", "dx.doi.org/")


def normalize_persistent_id(raw: str | None) -> str | None:
    """Normalize a DOI for identity comparison.

    Resolver URLs, ``doi:`` prefixes and URL encoding are removed, trailing
    citation punctuation is stripped and the result is casefolded, so
    "https://doi.org/10.1000/XYZ" and "10.1000/xyz" compare equal.

    Parameters
    ----------
    raw : str | None
        DOI in any common spelling.

    Returns
    -------
    str | None
        Normalized DOI, or None if the value is not DOI-shaped.
    """
    if not raw:
        return None

    doi = raw.strip()

    if doi.casefold().startswith(("http://", "https://")):
        doi = urlparse(doi).path.lstrip("/")

    for prefix in _DOI_PREFIXES:
        if doi.casefold().startswith(prefix):
            doi = doi[len(prefix) :]
            break

    doi = unquote(doi)

    # Parentheses are valid DOI characters, only citation punctuation goes
    doi = doi.rstrip(".,;").strip()
    doi = doi.casefold()

    if not doi.startswith("10.") or "/" not in doi:
        return None

    return doi


def normalize_native_id(raw: str | None) -> str | None:
    """Strip whitespace and the version suffix from an archive accession."""
    if not raw:
        return None
    native = raw.strip()
    match = ARXIV_ABS_RE.search(native)
    if match:
        native = match.group(1)
    if native.casefold().startswith("arxiv:"):
        native = native[len("arxiv:") :]
    native = VERSION_SUFFIX_RE.sub("", native)
    return native or None


def arxiv_id_from_url(url: str | None) -> str | None:
    """Extract the versionless accession from an abstract-page or PDF URL.

    Examples
    --------
    >>> arxiv_id_from_url("http://arxiv.org/abs/2101.00001v2")
    '2101.00001'
    """
    if not url:
        return None
    match = ARXIV_ABS_RE.search(url.strip())
    if not match:
        return None
    return VERSION_SUFFIX_RE.sub("", match.group(1)) or None


def find_doi_token(text: str | None) -> str | None:
    """Return the first DOI-shaped token in free text, normalized."""
    if not text:
        return None
    match = DOI_TOKEN_RE.search(text)
    if not match:
        return None
    return normalize_persistent_id(match.group(1))


def normalize_title(title: str | None) -> str:
    """Normalize a title for weak identity matching.

    Applies NFKC and casefold, removes non-word characters and collapses
    whitespace, so "Non-Markovian" and "NonMarkovian" share a key.
    """
    if not title:
        return ""
    text = unicodedata.normalize("NFKC", title)
    text = text.casefold()
    text = NON_WORD_RE.sub("", text)
    return " ".join(text.split())


def build_derived_links(
    persistent_id: str | None,
    native_id: str | None,
    native_scheme: str | None,
) -> DerivedLinks:
    """Compute output URLs from a record's identifiers.

    Parameters
    ----------
    persistent_id : str | None
        Normalized DOI.
    native_id : str | None
        Versionless accession.
    native_scheme : str | None
        Scheme of ``native_id``; only arXiv accessions produce archive links.

    Returns
    -------
    DerivedLinks
        Computed links, fields None where the identifier is missing.
    """
    links = DerivedLinks()
    if native_id and native_scheme == ARXIV_SCHEME:
        links.primary_source_url = f"https://arxiv.org/abs/{native_id}"
        links.primary_source_pdf_url = f"https://arxiv.org/pdf/{native_id}"
    if persistent_id:
        links.external_ref_url = f"https://doi.org/{persistent_id}"
    return links
