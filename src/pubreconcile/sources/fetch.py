"""Fetch stage: per-researcher source entries, filtered by tenure."""

from collections.abc import Sequence
from datetime import date
from typing import Protocol, runtime_checkable

from pubreconcile.audit.logger import AuditLogger
from pubreconcile.errors import ConfigInconsistency, SourceUnavailable
from pubreconcile.models.records import ResearcherProfile
from pubreconcile.sources.tenure import should_include_publication

__all__ = ["SourceEntry", "SourceFetcher", "check_fetchable", "fetch_source_records"]


@runtime_checkable
class SourceEntry(Protocol):
    """Raw entry with the fields the tenure filter needs."""

    @property
    def published_on(self) -> date | None: ...

    @property
    def reference_text(self) -> str | None: ...


@runtime_checkable
class SourceFetcher(Protocol):
    """Per-researcher source of raw entries."""

    name: str

    def supports(self, researcher: ResearcherProfile) -> bool:
        """True if the researcher has an identifier this source understands."""
        ...

    async def fetch(self, researcher: ResearcherProfile) -> list[SourceEntry]:
        """Fetch every entry listed for the researcher.

        Raises ``SourceUnavailable`` when the source cannot be reached or
        answers with something unusable.
        """
        ...


def check_fetchable(researcher: ResearcherProfile) -> None:
    """Raise ConfigInconsistency if the researcher has no source identifier."""
    if not researcher.has_source_ids:
        raise ConfigInconsistency(
            researcher.researcher_id,
            f"{researcher.researcher_id} has neither an ORCID nor an arXiv author id",
        )


async def fetch_source_records(
    roster: Sequence[ResearcherProfile],
    fetcher: SourceFetcher,
    source_name: str | None = None,
    *,
    logger: AuditLogger | None = None,
    today: date | None = None,
) -> dict[str, list[SourceEntry]]:
    """Fetch raw entries for every researcher in the roster.

    Researchers are fetched one after another in roster order. A researcher
    without source identifiers is skipped; a source failure leaves that
    researcher's contribution empty. Neither aborts the stage.

    Parameters
    ----------
    roster : Sequence[ResearcherProfile]
        Researchers to fetch.
    fetcher : SourceFetcher
        Source client.
    source_name : str | None, optional
        Name used in audit events. Defaults to ``fetcher.name``.
    logger : AuditLogger | None, optional
        Audit logger.
    today : date | None, optional
        Reference date for open-ended tenure windows.

    Returns
    -------
    dict[str, list[SourceEntry]]
        Entries kept by the tenure filter, keyed by researcher id in roster
        order. Skipped researchers are absent.
    """
    source_name = source_name or fetcher.name
    results: dict[str, list[SourceEntry]] = {}

    for researcher in roster:
        rid = researcher.researcher_id
        try:
            check_fetchable(researcher)
        except ConfigInconsistency as e:
            if logger:
                logger.researcher_skipped(rid, str(e))
            continue

        if not fetcher.supports(researcher):
            if logger:
                logger.event(
                    "researcher_not_listed",
                    data={"source": source_name, "researcher_id": rid},
                    level="DEBUG",
                )
            results[rid] = []
            continue

        try:
            entries = await fetcher.fetch(researcher)
        except SourceUnavailable as e:
            if logger:
                logger.source_unavailable(source_name, rid, str(e))
            results[rid] = []
            continue

        kept = [
            entry
            for entry in entries
            if should_include_publication(
                entry.published_on, researcher, entry.reference_text, today=today
            )
        ]
        results[rid] = kept

        if logger:
            logger.event(
                "source_fetched",
                data={
                    "source": source_name,
                    "researcher_id": rid,
                    "entries_listed": len(entries),
                    "entries_kept": len(kept),
                },
            )

    return results
