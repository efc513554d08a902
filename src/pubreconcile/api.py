"""Public API for reconciling publication records.

This module provides the main entry point of pubreconcile:

- Merging adapted source records into one duplicate-free set
- Enriching the survivors from external collaborators
- Re-collapsing records that enrichment revealed as duplicates
- Finalizing records for output
"""

from __future__ import annotations

import asyncio
import copy
import time
from collections.abc import Iterable, Sequence

from pubreconcile.audit.logger import AuditLogger
from pubreconcile.config import ReconcileConfig
from pubreconcile.enrich.orchestrator import Enricher
from pubreconcile.enrich.scheduling import RequestScheduler, SchedulingPolicy
from pubreconcile.enrich.services import EnrichmentServices
from pubreconcile.finalize import finalize_records
from pubreconcile.merge.engine import merge_with_summary
from pubreconcile.merge.identity import check_identity_invariants
from pubreconcile.models.records import PublicationRecord

__all__ = [
    "run_merge_and_enrich",
    "arun_merge_and_enrich",
    "check_identity_invariants",
]


def _elapsed(start: float) -> float:
    return round(time.perf_counter() - start, 3)


async def arun_merge_and_enrich(
    source_record_sets: Iterable[Iterable[PublicationRecord]],
    config: ReconcileConfig,
    *,
    services: EnrichmentServices | None = None,
    options: SchedulingPolicy | None = None,
    logger: AuditLogger | None = None,
) -> list[PublicationRecord]:
    """Merge, enrich, re-merge and finalize records.

    Coroutine form of ``run_merge_and_enrich`` for callers that already
    run an event loop.
    """
    record_sets: list[Sequence[PublicationRecord]] = [
        copy.deepcopy(list(record_set)) for record_set in source_record_sets
    ]

    start = time.perf_counter()
    if logger:
        logger.stage_started("merge", expected_records=sum(len(s) for s in record_sets))
    merged, summary = merge_with_summary(record_sets, logger=logger)
    if logger:
        logger.stage_finished("merge", _elapsed(start), counters=summary.to_dict())

    scheduler = RequestScheduler(options, logger=logger)
    enricher = Enricher(config, services=services, scheduler=scheduler, logger=logger)
    start = time.perf_counter()
    if logger:
        logger.stage_started("enrich", expected_records=len(merged))
    enriched = await enricher.enrich_all(merged)
    if logger:
        logger.stage_finished(
            "enrich",
            _elapsed(start),
            counters={"lookups": scheduler.calls, "lookup_failures": scheduler.failures},
        )

    # Enrichment can give two distinct survivors the same persistent id
    start = time.perf_counter()
    if logger:
        logger.stage_started("recollapse", expected_records=len(enriched))
    collapsed, summary = merge_with_summary([enriched], logger=logger)
    if logger:
        logger.stage_finished("recollapse", _elapsed(start), counters=summary.to_dict())

    return finalize_records(collapsed, config)


def run_merge_and_enrich(
    source_record_sets: Iterable[Iterable[PublicationRecord]],
    config: ReconcileConfig,
    *,
    services: EnrichmentServices | None = None,
    options: SchedulingPolicy | None = None,
    logger: AuditLogger | None = None,
) -> list[PublicationRecord]:
    """Reconcile source records into one duplicate-free, enriched list.

    Input records are copied, never mutated, so repeated calls with the
    same inputs and deterministic collaborators give identical results.

    Parameters
    ----------
    source_record_sets : Iterable[Iterable[PublicationRecord]]
        One iterable of adapted records per source, in arrival order.
    config : ReconcileConfig
        Roster, name variants, reference tables and highlights.
    services : EnrichmentServices | None, optional
        External collaborators. None runs offline: no lookups are made.
    options : SchedulingPolicy | None, optional
        Concurrency, pacing and timeout limits for lookups.
    logger : AuditLogger | None, optional
        Audit logger. If None, no logging.

    Returns
    -------
    list[PublicationRecord]
        Finalized records in order of first arrival.

    Examples
    --------
    Offline reconciliation of cached records:

        >>> from pubreconcile import load_config, run_merge_and_enrich
        >>> config = load_config("config")
        >>> records = run_merge_and_enrich([preprint_records, profile_records], config)
        >>> check_identity_invariants(records)
    """
    return asyncio.run(
        arun_merge_and_enrich(
            source_record_sets,
            config,
            services=services,
            options=options,
            logger=logger,
        )
    )
