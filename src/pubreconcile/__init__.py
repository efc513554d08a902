"""Merge, deduplicate and enrich researcher publication lists.

This package provides:
- Data models (pubreconcile.models): canonical and per-source record types
- Normalization (pubreconcile.normalize): names, journal references, identifiers
- Parsing (pubreconcile.parse): embedded BibTeX/RIS citation text
- Adapters (pubreconcile.adapters): source shapes to canonical records
- Merge (pubreconcile.merge): identity resolution and survivor selection
- Enrichment (pubreconcile.enrich): lookups against Crossref and arXiv
- Sources (pubreconcile.sources): per-researcher fetching and caches
- Clients (pubreconcile.clients): arXiv, ORCID and Crossref HTTP clients
- Engine (pubreconcile.engine): pipeline orchestration
- Audit (pubreconcile.audit): logging and traceability
- CLI (pubreconcile.cli): command-line interface
- Public API (pubreconcile.api): reconciliation entry point
"""

__version__ = "0.4.0"
__author__ = "pubreconcile maintainers"
__license__ = "MIT"

from pubreconcile.api import arun_merge_and_enrich, check_identity_invariants, run_merge_and_enrich
from pubreconcile.config import ReconcileConfig, load_config
from pubreconcile.engine import PipelineConfig, PipelineResult, run_pipeline
from pubreconcile.enrich import EnrichmentServices, SchedulingPolicy
from pubreconcile.errors import (
    ConfigError,
    ConfigInconsistency,
    EnrichmentLookupFailed,
    IdentityConflict,
    MalformedCitationText,
    PubReconcileError,
    SourceUnavailable,
)
from pubreconcile.merge import merge_records
from pubreconcile.models import PublicationRecord, ResearcherProfile, SourceOrigin

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    # Entry points
    "run_merge_and_enrich",
    "arun_merge_and_enrich",
    "check_identity_invariants",
    "merge_records",
    "run_pipeline",
    # Configuration
    "ReconcileConfig",
    "load_config",
    "PipelineConfig",
    "PipelineResult",
    "EnrichmentServices",
    "SchedulingPolicy",
    # Models
    "PublicationRecord",
    "ResearcherProfile",
    "SourceOrigin",
    # Errors
    "PubReconcileError",
    "ConfigError",
    "ConfigInconsistency",
    "SourceUnavailable",
    "EnrichmentLookupFailed",
    "MalformedCitationText",
    "IdentityConflict",
]
