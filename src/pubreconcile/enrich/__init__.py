"""Enrichment of merged records from external collaborators."""

from pubreconcile.enrich.orchestrator import Enricher
from pubreconcile.enrich.scheduling import RequestScheduler, SchedulingPolicy
from pubreconcile.enrich.services import (
    CitationMetadataSource,
    EnrichmentServices,
    PreprintSearch,
)
from pubreconcile.enrich.similarity import (
    DEFAULT_TITLE_THRESHOLD,
    best_candidate,
    is_accepted,
    title_overlap_score,
)

__all__ = [
    "Enricher",
    "RequestScheduler",
    "SchedulingPolicy",
    "CitationMetadataSource",
    "PreprintSearch",
    "EnrichmentServices",
    "DEFAULT_TITLE_THRESHOLD",
    "title_overlap_score",
    "is_accepted",
    "best_candidate",
]
