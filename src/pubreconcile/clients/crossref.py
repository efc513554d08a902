"""Crossref REST API client (citation-metadata source).

Docs: https://api.crossref.org/
"""

import html
import re
from typing import Any

import httpx

from pubreconcile.clients.http import HttpClientFactory, transient_retry, user_agent
from pubreconcile.errors import EnrichmentLookupFailed
from pubreconcile.models.sources import CitationCandidate, CitationMetadata
from pubreconcile.normalize.identifiers import normalize_persistent_id
from pubreconcile.normalize.references import format_citation_ref

__all__ = ["CrossrefClient", "metadata_from_work", "candidate_from_work"]

_CROSSREF_API = "https://api.crossref.org"
SEARCH_ROWS = 3
MIN_ABSTRACT_LENGTH = 50

_TAG_RE = re.compile(r"<[^>]*>")
_QUERY_PUNCT_RE = re.compile(r"[^\w\s]")


def _first(values: Any) -> str | None:
    if isinstance(values, list) and values:
        return str(values[0]).strip() or None
    return None


def _authors(work: dict[str, Any]) -> str | None:
    names = []
    for author in work.get("author") or []:
        if author.get("literal"):
            names.append(author["literal"].strip())
            continue
        name = " ".join(x.strip() for x in (author.get("given"), author.get("family")) if x)
        if name:
            names.append(name)
    return ", ".join(names) or None


def clean_abstract(raw: str | None, min_length: int = 0) -> str | None:
    """Strip JATS/HTML markup and entities; drop abstracts not longer than ``min_length``."""
    if not raw:
        return None
    text = " ".join(html.unescape(_TAG_RE.sub("", raw)).split())
    if not text or len(text) <= min_length:
        return None
    return text


def _year(work: dict[str, Any], *keys: str) -> int | None:
    for key in keys:
        parts = (work.get(key) or {}).get("date-parts")
        if parts and parts[0] and parts[0][0]:
            try:
                return int(parts[0][0])
            except (TypeError, ValueError):
                continue
    return None


def metadata_from_work(work: dict[str, Any]) -> CitationMetadata:
    """Convert a ``/works/{doi}`` message into citation metadata."""
    return CitationMetadata(
        persistent_id=normalize_persistent_id(work.get("DOI")),
        authors=_authors(work),
        abstract=clean_abstract(work.get("abstract"), MIN_ABSTRACT_LENGTH),
        container_title=_first(work.get("container-title")),
        volume=work.get("volume") or None,
        issue=work.get("issue") or None,
        pages=work.get("page") or None,
        year=_year(work, "issued", "published"),
        work_type=work.get("type") or None,
    )


def candidate_from_work(work: dict[str, Any]) -> CitationCandidate | None:
    """Convert a ``/works`` search item into a candidate; None if untitled."""
    title = _first(work.get("title"))
    if not title:
        return None

    container = _first(work.get("container-title"))
    citation_ref = None
    if container:
        citation_ref = format_citation_ref(
            container,
            work.get("volume"),
            None,
            work.get("page"),
            _year(work, "published", "issued"),
        )

    return CitationCandidate(
        title=title,
        persistent_id=normalize_persistent_id(work.get("DOI")),
        authors=_authors(work),
        abstract=clean_abstract(work.get("abstract")),
        citation_ref=citation_ref,
    )


class CrossrefClient:
    """Crossref client for DOI lookups and title/author searches.

    Parameters
    ----------
    mailto : str | None, optional
        Contact address for the Crossref polite pool.
    transport : httpx.AsyncBaseTransport | None, optional
        Custom transport (tests use ``httpx.MockTransport``).
    """

    name = "crossref"

    def __init__(
        self,
        mailto: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        agent = user_agent()
        if mailto:
            agent += f" (mailto:{mailto})"
        self._client = HttpClientFactory.client(
            base_url=_CROSSREF_API,
            headers={"User-Agent": agent},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CrossrefClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    @transient_retry()
    async def _get_message(
        self, path: str, params: dict[str, str | int] | None = None
    ) -> dict[str, Any] | None:
        r = await self._client.get(path, params=params)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        try:
            message = r.json().get("message")
        except ValueError as e:
            raise EnrichmentLookupFailed(f"unparseable Crossref response for {path}") from e
        if not isinstance(message, dict):
            raise EnrichmentLookupFailed(f"Crossref response for {path} has no message")
        return message

    async def lookup_by_id(self, persistent_id: str) -> CitationMetadata | None:
        """Fetch structured metadata for one DOI; None if Crossref does not know it."""
        doi = normalize_persistent_id(persistent_id) or persistent_id
        message = await self._get_message(f"/works/{doi}")
        if message is None:
            return None
        return metadata_from_work(message)

    async def search_by_title_author(self, title: str, surname: str) -> list[CitationCandidate]:
        """Search works by title and author surname, best hits first."""
        clean = " ".join(_QUERY_PUNCT_RE.sub(" ", title).split())
        message = await self._get_message(
            "/works", params={"query": f"{clean} {surname}".strip(), "rows": SEARCH_ROWS}
        )
        if message is None:
            return []
        candidates = []
        for item in message.get("items") or []:
            candidate = candidate_from_work(item)
            if candidate is not None:
                candidates.append(candidate)
        return candidates
