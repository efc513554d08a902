"""Data models for pubreconcile."""

from pubreconcile.models.records import (
    DerivedLinks,
    HighlightAnnotations,
    PublicationRecord,
    ResearcherProfile,
    SourceOrigin,
    TransientPayload,
)
from pubreconcile.models.sources import (
    CitationCandidate,
    CitationFields,
    CitationMetadata,
    CitationText,
    ExternalId,
    PreprintEntry,
    ProfileWork,
    parse_date,
)

__all__ = [
    "SourceOrigin",
    "PublicationRecord",
    "ResearcherProfile",
    "DerivedLinks",
    "HighlightAnnotations",
    "TransientPayload",
    "ExternalId",
    "CitationText",
    "PreprintEntry",
    "ProfileWork",
    "CitationMetadata",
    "CitationCandidate",
    "CitationFields",
    "parse_date",
]
