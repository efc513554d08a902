"""arXiv client: author feeds and the Atom query API."""

import json
import re
import xml.etree.ElementTree as ET

import httpx

from pubreconcile.clients.http import HttpClientFactory, transient_retry
from pubreconcile.errors import EnrichmentLookupFailed, SourceUnavailable
from pubreconcile.models.records import ResearcherProfile
from pubreconcile.models.sources import PreprintEntry
from pubreconcile.normalize.identifiers import arxiv_id_from_url

__all__ = ["ArxivClient"]

_FEED_BASE = "https://arxiv.org/a"
_QUERY_API = "https://export.arxiv.org/api/query"

_NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}

_JSONP_RE = re.compile(r"jsonarXivFeed\((.*)\)", re.DOTALL)
_QUERY_PUNCT_RE = re.compile(r"[^\w\s]")


def _text(node: ET.Element, path: str) -> str | None:
    value = node.findtext(path, default=None, namespaces=_NS)
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


def _clean_query_title(title: str) -> str:
    return " ".join(_QUERY_PUNCT_RE.sub(" ", title).split())


def parse_feed_payload(text: str) -> list[PreprintEntry]:
    """Parse an author feed, with or without its ``jsonarXivFeed(...)`` wrapper."""
    match = _JSONP_RE.search(text)
    payload = match.group(1) if match else text
    data = json.loads(payload)
    return [PreprintEntry.from_dict(e) for e in data.get("entries") or [] if isinstance(e, dict)]


def parse_atom(xml_text: str) -> list[PreprintEntry]:
    """Parse an Atom result page from the query API."""
    root = ET.fromstring(xml_text)
    entries: list[PreprintEntry] = []
    for entry in root.findall("atom:entry", _NS):
        entry_id = _text(entry, "atom:id") or ""
        title = _text(entry, "atom:title") or ""
        # An empty result page carries a single error entry with no title
        if not title or "/api/errors" in entry_id:
            continue

        authors = [
            name
            for a in entry.findall("atom:author", _NS)
            if (name := _text(a, "atom:name"))
        ]
        categories = [
            c.attrib["term"] for c in entry.findall("atom:category", _NS) if c.attrib.get("term")
        ]

        entries.append(
            PreprintEntry(
                entry_id=entry_id,
                title=title,
                summary=_text(entry, "atom:summary"),
                authors=", ".join(authors) or None,
                published=_text(entry, "atom:published"),
                updated=_text(entry, "atom:updated"),
                categories=tuple(categories),
                doi=_text(entry, "arxiv:doi"),
                journal_ref=_text(entry, "arxiv:journal_ref"),
            )
        )
    return entries


class ArxivClient:
    """arXiv author-feed fetcher and preprint search.

    Author feeds are looked up by arXiv author id first and by ORCID iD
    as a fallback. Searches go through the Atom query API.

    Parameters
    ----------
    transport : httpx.AsyncBaseTransport | None, optional
        Custom transport (tests use ``httpx.MockTransport``).
    """

    name = "arxiv"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client = HttpClientFactory.client(transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ArxivClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Author feeds
    # ------------------------------------------------------------------

    @transient_retry()
    async def _get_feed(self, author_key: str) -> str:
        r = await self._client.get(f"{_FEED_BASE}/{author_key}.js")
        r.raise_for_status()
        return r.text

    async def author_feed(self, author_key: str) -> list[PreprintEntry]:
        """Fetch every entry of one author feed."""
        return parse_feed_payload(await self._get_feed(author_key))

    def supports(self, researcher: ResearcherProfile) -> bool:
        return bool(researcher.arxiv_author_id or researcher.orcid)

    async def fetch(self, researcher: ResearcherProfile) -> list[PreprintEntry]:
        """Fetch a researcher's feed, falling back from author id to ORCID iD.

        Raises
        ------
        SourceUnavailable
            If no configured identifier yields a usable feed.
        """
        failures = []
        for key in (researcher.arxiv_author_id, researcher.orcid):
            if not key:
                continue
            try:
                return await self.author_feed(key)
            except (httpx.HTTPError, ValueError) as e:
                failures.append(f"{key}: {type(e).__name__}: {e}")

        raise SourceUnavailable(self.name, researcher.researcher_id, "; ".join(failures))

    # ------------------------------------------------------------------
    # Query API
    # ------------------------------------------------------------------

    @transient_retry()
    async def _query(self, params: dict[str, str | int]) -> list[PreprintEntry]:
        r = await self._client.get(_QUERY_API, params=params)
        r.raise_for_status()
        try:
            return parse_atom(r.text)
        except ET.ParseError as e:
            raise EnrichmentLookupFailed(f"unparseable arXiv response: {e}") from e

    async def search_by_title_author(self, title: str, first_author: str) -> PreprintEntry | None:
        """Return the top hit for a title and first author, if any."""
        author = first_author.split(",")[0].strip()
        query = f'ti:"{_clean_query_title(title)}" AND au:"{author}"'
        entries = await self._query({"search_query": query, "max_results": 1})
        return entries[0] if entries else None

    async def find_by_persistent_id(self, persistent_id: str) -> str | None:
        """Return the accession of the entry listing the given DOI, if any."""
        entries = await self._query({"search_query": f'doi:"{persistent_id}"', "max_results": 1})
        if not entries:
            return None
        return arxiv_id_from_url(entries[0].entry_id)

    async def fetch_by_native_id(self, native_id: str) -> PreprintEntry | None:
        """Fetch one entry by accession."""
        entries = await self._query({"id_list": native_id, "max_results": 1})
        return entries[0] if entries else None
