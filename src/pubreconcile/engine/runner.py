"""End-to-end reconciliation pipeline runner.

Stages:
    fetch:   arXiv author feeds and ORCID works, per researcher, into the
             raw-source cache files of the data directory
    merge:   adapt cached entries, merge, enrich, re-merge and finalize
    write:   serialize the records to publications.json

Each stage can be run on its own; ``merge`` only needs the cache files
left by an earlier ``fetch``.
"""

import asyncio
import time
import traceback
from collections.abc import Sequence
from pathlib import Path

import httpx

from pubreconcile.adapters.preprint import adapt_preprint_entries
from pubreconcile.adapters.profile import adapt_profile_works
from pubreconcile.api import arun_merge_and_enrich
from pubreconcile.audit.logger import AuditLogger
from pubreconcile.clients.arxiv import ArxivClient
from pubreconcile.clients.crossref import CrossrefClient
from pubreconcile.clients.orcid import OrcidClient
from pubreconcile.config import ReconcileConfig, load_config
from pubreconcile.engine.config import PipelineConfig, PipelineResult
from pubreconcile.enrich.services import EnrichmentServices
from pubreconcile.errors import IdentityConflict
from pubreconcile.finalize import write_publications
from pubreconcile.merge.identity import check_identity_invariants
from pubreconcile.models.records import PublicationRecord
from pubreconcile.models.sources import PreprintEntry, ProfileWork
from pubreconcile.sources.cache import (
    PREPRINT_CACHE_FILE,
    PROFILE_CACHE_FILE,
    read_source_cache,
    write_source_cache,
)
from pubreconcile.sources.fetch import SourceFetcher, fetch_source_records

__all__ = [
    "fetch_sources",
    "load_source_records",
    "reconcile_cached",
    "run_pipeline",
]


# ---------------------------------------------------------------------------
# Individual stage functions
# ---------------------------------------------------------------------------


async def _fetch_into_cache(
    fetcher: SourceFetcher,
    reconcile: ReconcileConfig,
    cache_path: Path,
    logger: AuditLogger | None,
) -> int:
    start = time.perf_counter()
    stage = f"fetch_{fetcher.name}"
    if logger:
        logger.stage_started(stage, expected_records=len(reconcile.roster))

    entries = await fetch_source_records(reconcile.roster, fetcher, logger=logger)
    count = write_source_cache(cache_path, reconcile.roster, entries)

    if logger:
        logger.artifact_written(str(cache_path), stage=stage, record_count=count)
        logger.stage_finished(
            stage,
            round(time.perf_counter() - start, 3),
            counters={"researchers": len(entries), "entries": count},
        )
    return count


async def fetch_sources(
    config: PipelineConfig,
    reconcile: ReconcileConfig,
    logger: AuditLogger | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, str]:
    """Refresh the raw-source caches selected in ``config``.

    Parameters
    ----------
    config : PipelineConfig
        Run parameters (which sources, data directory).
    reconcile : ReconcileConfig
        Roster and ORCID token.
    logger : AuditLogger | None, optional
        Audit logger.
    transport : httpx.AsyncBaseTransport | None, optional
        Transport for the HTTP clients (tests).

    Returns
    -------
    dict[str, str]
        Map of cache name to written file path.
    """
    written: dict[str, str] = {}

    if config.fetch_preprints:
        path = config.data_dir / PREPRINT_CACHE_FILE
        async with ArxivClient(transport=transport) as client:
            await _fetch_into_cache(client, reconcile, path, logger)
        written["arxiv_cache"] = str(path)

    if config.fetch_profiles:
        path = config.data_dir / PROFILE_CACHE_FILE
        async with OrcidClient(reconcile.orcid_access_token, transport=transport) as client:
            await _fetch_into_cache(client, reconcile, path, logger)
        written["orcid_cache"] = str(path)

    return written


def load_source_records(data_dir: Path) -> list[list[PublicationRecord]]:
    """Adapt the cached entries into one record set per source.

    The preprint set comes first, so preprint records win arrival-order
    ties against profile records of the same work.
    """
    preprints = read_source_cache(data_dir / PREPRINT_CACHE_FILE, PreprintEntry)
    profiles = read_source_cache(data_dir / PROFILE_CACHE_FILE, ProfileWork)

    preprint_records = [
        record
        for rid, entries in preprints.items()
        for record in adapt_preprint_entries(entries, rid)
    ]
    profile_records = [
        record for rid, works in profiles.items() for record in adapt_profile_works(works, rid)
    ]
    return [preprint_records, profile_records]


async def reconcile_cached(
    config: PipelineConfig,
    reconcile: ReconcileConfig,
    record_sets: Sequence[Sequence[PublicationRecord]],
    logger: AuditLogger | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[PublicationRecord]:
    """Merge and enrich adapted records, online or offline per ``config``."""
    if config.offline:
        records = await arun_merge_and_enrich(
            record_sets, reconcile, options=config.scheduling_policy(), logger=logger
        )
    else:
        async with (
            ArxivClient(transport=transport) as arxiv,
            CrossrefClient(config.crossref_mailto, transport=transport) as crossref,
        ):
            services = EnrichmentServices(citation_source=crossref, preprint_source=arxiv)
            records = await arun_merge_and_enrich(
                record_sets,
                reconcile,
                services=services,
                options=config.scheduling_policy(),
                logger=logger,
            )

    try:
        check_identity_invariants(records)
    except IdentityConflict as e:
        # Reported, not fatal: the run still writes what it assembled
        if logger:
            logger.event(
                "identity_conflict",
                data={"key": e.key, "message": str(e)},
                level="WARN",
            )
    return records


# ---------------------------------------------------------------------------
# Pipeline runner
# ---------------------------------------------------------------------------


async def _run_stages(
    config: PipelineConfig,
    logger: AuditLogger | None,
    merge: bool,
    transport: httpx.AsyncBaseTransport | None,
) -> PipelineResult:
    """Execute the selected stages sequentially.

    Accumulates partial results so that diagnostic information is
    preserved even when a late stage fails.
    """
    researchers = 0
    preprint_entries = 0
    profile_entries = 0
    output_files: dict[str, str] = {}

    try:
        reconcile = load_config(
            config.config_dir, title_match_threshold=config.title_match_threshold
        )
        researchers = len(reconcile.roster)

        output_files.update(await fetch_sources(config, reconcile, logger, transport))
        if not merge:
            return PipelineResult(
                success=True,
                researchers=researchers,
                output_files=output_files,
            )

        record_sets = load_source_records(config.data_dir)
        preprint_entries = len(record_sets[0])
        profile_entries = len(record_sets[1])

        records = await reconcile_cached(config, reconcile, record_sets, logger, transport)

        bytes_written = write_publications(records, config.output_path)
        output_files["publications"] = str(config.output_path)
        if logger:
            logger.artifact_written(
                str(config.output_path),
                stage="write",
                bytes_written=bytes_written,
                record_count=len(records),
            )

        return PipelineResult(
            success=True,
            researchers=researchers,
            preprint_entries=preprint_entries,
            profile_entries=profile_entries,
            records_out=len(records),
            output_files=output_files,
        )

    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        if logger:
            logger.event(
                "pipeline_error",
                stage="pipeline",
                data={"error": error_msg, "traceback": traceback.format_exc()},
                level="ERROR",
            )
        return PipelineResult(
            success=False,
            researchers=researchers,
            preprint_entries=preprint_entries,
            profile_entries=profile_entries,
            output_files=output_files,
            error_message=error_msg,
        )


def run_pipeline(
    config: PipelineConfig | None = None,
    logger: AuditLogger | None = None,
    *,
    merge: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PipelineResult:
    """Run the reconciliation pipeline.

    Parameters
    ----------
    config : PipelineConfig | None, optional
        Pipeline configuration. If None, uses defaults.
    logger : AuditLogger | None, optional
        Audit logger for tracking. If None, no logging.
    merge : bool, optional
        Run the merge and write stages after fetching (default: True).
    transport : httpx.AsyncBaseTransport | None, optional
        Transport for every HTTP client (tests use ``httpx.MockTransport``).

    Returns
    -------
    PipelineResult
        Pipeline execution results.

    Examples
    --------
    Full refresh:

        >>> from pubreconcile.engine import run_pipeline
        >>> result = run_pipeline()
        >>> if result.success:
        ...     print(f"Wrote {result.records_out} publications")

    Re-merge cached data without network access:

        >>> from pubreconcile.engine import PipelineConfig
        >>> config = PipelineConfig(fetch_preprints=False, fetch_profiles=False, offline=True)
        >>> result = run_pipeline(config)
    """
    if config is None:
        config = PipelineConfig()

    return asyncio.run(_run_stages(config, logger, merge, transport))
