"""Exception types for pubreconcile.

Only ``ConfigError`` aborts a run. The other failures are recovered locally
by the component that detects them and surface as absent fields plus an
audit event.
"""

__all__ = [
    "PubReconcileError",
    "ConfigError",
    "ConfigInconsistency",
    "SourceUnavailable",
    "EnrichmentLookupFailed",
    "MalformedCitationText",
    "IdentityConflict",
]


class PubReconcileError(Exception):
    """Base class for all pubreconcile errors."""


class ConfigError(PubReconcileError):
    """Raised when a required lookup table is missing or invalid.

    Parameters
    ----------
    message : str
        Error message.
    file : str | None, optional
        Config file that failed to load.
    """

    def __init__(self, message: str, file: str | None = None) -> None:
        super().__init__(message)
        self.file = file


class ConfigInconsistency(PubReconcileError):
    """Raised when a researcher entry has no fetchable source identifier."""

    def __init__(self, researcher_id: str, message: str) -> None:
        super().__init__(message)
        self.researcher_id = researcher_id


class SourceUnavailable(PubReconcileError):
    """Raised by a fetcher that could not retrieve a researcher's records."""

    def __init__(self, source: str, researcher_id: str, message: str) -> None:
        super().__init__(f"{source} unavailable for {researcher_id}: {message}")
        self.source = source
        self.researcher_id = researcher_id


class EnrichmentLookupFailed(PubReconcileError):
    """Raised by a collaborator when a lookup response cannot be used."""


class MalformedCitationText(PubReconcileError):
    """Raised inside the citation sub-parser when a structured parse fails."""


class IdentityConflict(PubReconcileError):
    """Raised when two final records resolve to the same publication."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
