"""ORCID public API client (author-profile source)."""

import asyncio
from typing import Any

import httpx

from pubreconcile.clients.http import HttpClientFactory, transient_retry
from pubreconcile.errors import SourceUnavailable
from pubreconcile.models.records import ResearcherProfile
from pubreconcile.models.sources import ProfileWork

__all__ = ["OrcidClient", "contributor_names"]

_ORCID_API = "https://pub.orcid.org/v3.0"
FULL_WORK_DELAY_SECONDS = 0.5


def contributor_names(full_work: dict[str, Any]) -> list[str]:
    """Credit names listed on a full work record."""
    contributors = (full_work.get("contributors") or {}).get("contributor") or []
    names = []
    for contributor in contributors:
        credit = contributor.get("credit-name") or {}
        if credit.get("value"):
            names.append(str(credit["value"]).strip())
    return names


class OrcidClient:
    """Fetches work summaries from researchers' ORCID records.

    Works listing neither a DOI nor an arXiv id are fetched in full to
    pick up contributor names and embedded citation text; those requests
    are spaced by ``full_work_delay`` seconds.

    Parameters
    ----------
    access_token : str | None
        Bearer token for the public API.
    full_work_delay : float, optional
        Pause after each full-work request.
    transport : httpx.AsyncBaseTransport | None, optional
        Custom transport (tests use ``httpx.MockTransport``).
    """

    name = "orcid"

    def __init__(
        self,
        access_token: str | None,
        full_work_delay: float = FULL_WORK_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token
        self.full_work_delay = full_work_delay
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = HttpClientFactory.client(
            base_url=_ORCID_API, headers=headers, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "OrcidClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    @transient_retry()
    async def _get(self, path: str) -> dict[str, Any]:
        r = await self._client.get(path)
        r.raise_for_status()
        return r.json()

    def supports(self, researcher: ResearcherProfile) -> bool:
        return bool(researcher.orcid)

    async def fetch(self, researcher: ResearcherProfile) -> list[ProfileWork]:
        """Fetch every dated work on a researcher's ORCID record.

        Raises
        ------
        SourceUnavailable
            If no token is configured, or the works list cannot be fetched.
        """
        rid = researcher.researcher_id
        if not self.access_token:
            raise SourceUnavailable(self.name, rid, "no ORCID access token configured")

        try:
            data = await self._get(f"/{researcher.orcid}/works")
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailable(self.name, rid, f"{type(e).__name__}: {e}") from e

        works = []
        for group in data.get("group") or []:
            summaries = group.get("work-summary") or []
            if not summaries:
                continue
            summary = dict(summaries[0])
            if not ((summary.get("publication-date") or {}).get("year")):
                continue

            work = ProfileWork.from_dict(summary)
            if not work.has_strong_id and work.put_code:
                work = await self._with_full_details(researcher.orcid, summary, work)
            works.append(work)
        return works

    async def _with_full_details(
        self, orcid: str, summary: dict[str, Any], work: ProfileWork
    ) -> ProfileWork:
        try:
            full = await self._get(f"/{orcid}/work/{work.put_code}")
        except (httpx.HTTPError, ValueError):
            # The summary alone is still a usable work
            return work
        finally:
            await asyncio.sleep(self.full_work_delay)

        summary["contributors"] = contributor_names(full)
        citation = full.get("citation") or {}
        if citation.get("citation-value"):
            summary["citation"] = {
                "type": citation.get("citation-type"),
                "value": citation["citation-value"],
            }
        return ProfileWork.from_dict(summary)
