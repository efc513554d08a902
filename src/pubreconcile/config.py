"""Configuration bundle: roster, reference tables and highlight annotations.

A config directory holds:

- ``basics.json``: researcher roster keyed by researcher id (required)
- ``journal_abbreviations.json``: full journal name to abbreviation (required)
- ``journal_normalization_patterns.json``: regex pattern to abbreviation (required)
- ``highlights.json``: ``{"entries": [{"doi", "coverage", "awards"}]}`` (optional)
- ``orcid_oauth.json``: ``{"access_token": ...}`` (optional)

Every file is validated against a JSON schema shipped in
``pubreconcile/schemas``. The loaded bundle is immutable for the run.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from importlib.resources import files
from pathlib import Path
from types import MappingProxyType
from typing import Any

import jsonschema

from pubreconcile.errors import ConfigError
from pubreconcile.models.records import ResearcherProfile
from pubreconcile.models.sources import parse_date
from pubreconcile.normalize.identifiers import normalize_persistent_id
from pubreconcile.normalize.names import build_variant_map

__all__ = [
    "DEFAULT_TITLE_THRESHOLD",
    "HighlightEntry",
    "ReconcileConfig",
    "load_config",
    "roster_from_basics",
]

DEFAULT_TITLE_THRESHOLD = 0.6

BASICS_FILE = "basics.json"
ABBREVIATIONS_FILE = "journal_abbreviations.json"
PATTERNS_FILE = "journal_normalization_patterns.json"
HIGHLIGHTS_FILE = "highlights.json"
ORCID_OAUTH_FILE = "orcid_oauth.json"

_SCHEMAS = {
    BASICS_FILE: "basics.schema.json",
    ABBREVIATIONS_FILE: "substitution_table.schema.json",
    PATTERNS_FILE: "substitution_table.schema.json",
    HIGHLIGHTS_FILE: "highlights.schema.json",
    ORCID_OAUTH_FILE: "orcid_oauth.schema.json",
}


@dataclass(frozen=True)
class HighlightEntry:
    """Press coverage and awards for one DOI."""

    coverage: tuple[Any, ...] = ()
    awards: tuple[Any, ...] = ()


def _highlight_key(doi: str) -> str:
    return normalize_persistent_id(doi) or doi.strip().casefold()


@dataclass(frozen=True)
class ReconcileConfig:
    """Read-only configuration for one reconciliation run.

    Attributes
    ----------
    roster : tuple[ResearcherProfile, ...]
        Researchers in configuration order.
    journal_abbreviations : tuple[tuple[str, str], ...]
        Ordered (full name, abbreviation) pairs.
    normalization_patterns : tuple[tuple[str, str], ...]
        Ordered (regex pattern, abbreviation) pairs.
    highlights : Mapping[str, HighlightEntry]
        Highlight annotations keyed by normalized DOI.
    orcid_access_token : str | None
        Bearer token for the profile source.
    title_match_threshold : float
        Minimum title-overlap score (exclusive) for fuzzy citation matches.
    variant_map : Mapping[str, str]
        Name variant to canonical name map, derived from ``roster``.
    """

    roster: tuple[ResearcherProfile, ...]
    journal_abbreviations: tuple[tuple[str, str], ...] = ()
    normalization_patterns: tuple[tuple[str, str], ...] = ()
    highlights: Mapping[str, HighlightEntry] = field(
        default_factory=lambda: MappingProxyType({})
    )
    orcid_access_token: str | None = None
    title_match_threshold: float = DEFAULT_TITLE_THRESHOLD
    variant_map: Mapping[str, str] = field(init=False, repr=False, compare=False)
    _researchers: Mapping[str, ResearcherProfile] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate tables and derive lookup maps."""
        if not 0.0 <= self.title_match_threshold <= 1.0:
            raise ValueError(
                f"title_match_threshold must be in [0, 1], got {self.title_match_threshold}"
            )

        for pattern, _ in self.normalization_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigError(
                    f"Invalid journal normalization pattern {pattern!r}: {e}",
                    file=PATTERNS_FILE,
                ) from e

        if not isinstance(self.highlights, MappingProxyType):
            object.__setattr__(self, "highlights", MappingProxyType(dict(self.highlights)))
        object.__setattr__(self, "variant_map", build_variant_map(self.roster))
        object.__setattr__(
            self,
            "_researchers",
            MappingProxyType({r.researcher_id: r for r in self.roster}),
        )

    def researcher(self, researcher_id: str) -> ResearcherProfile | None:
        """Look up a researcher by id."""
        return self._researchers.get(researcher_id)

    def highlight_for(self, persistent_id: str | None) -> HighlightEntry | None:
        """Highlight annotations for a DOI, if any."""
        if not persistent_id:
            return None
        return self.highlights.get(_highlight_key(persistent_id))

    @classmethod
    def from_mappings(
        cls,
        basics: Mapping[str, Any],
        abbreviations: Mapping[str, str] | None = None,
        patterns: Mapping[str, str] | None = None,
        highlights: Mapping[str, Any] | None = None,
        orcid_oauth: Mapping[str, Any] | None = None,
        *,
        title_match_threshold: float = DEFAULT_TITLE_THRESHOLD,
    ) -> "ReconcileConfig":
        """Build a config from already-parsed JSON documents.

        Parameters
        ----------
        basics : Mapping[str, Any]
            Researcher roster document.
        abbreviations : Mapping[str, str] | None, optional
            Journal abbreviation table, in priority order.
        patterns : Mapping[str, str] | None, optional
            Normalization pattern table, in priority order.
        highlights : Mapping[str, Any] | None, optional
            Highlight document.
        orcid_oauth : Mapping[str, Any] | None, optional
            Profile-source credentials document.
        title_match_threshold : float, optional
            Fuzzy citation match threshold.

        Returns
        -------
        ReconcileConfig
            Validated configuration.

        Raises
        ------
        ConfigError
            If a document fails schema validation.
        """
        _validate(basics, BASICS_FILE)
        abbreviations = abbreviations or {}
        patterns = patterns or {}
        _validate(abbreviations, ABBREVIATIONS_FILE)
        _validate(patterns, PATTERNS_FILE)

        highlight_map: dict[str, HighlightEntry] = {}
        if highlights is not None:
            _validate(highlights, HIGHLIGHTS_FILE)
            for entry in highlights.get("entries") or []:
                highlight_map[_highlight_key(entry["doi"])] = HighlightEntry(
                    coverage=tuple(entry.get("coverage") or ()),
                    awards=tuple(entry.get("awards") or ()),
                )

        token = None
        if orcid_oauth is not None:
            _validate(orcid_oauth, ORCID_OAUTH_FILE)
            token = orcid_oauth["access_token"]

        return cls(
            roster=roster_from_basics(basics),
            journal_abbreviations=tuple(abbreviations.items()),
            normalization_patterns=tuple(patterns.items()),
            highlights=MappingProxyType(highlight_map),
            orcid_access_token=token,
            title_match_threshold=title_match_threshold,
        )


def roster_from_basics(basics: Mapping[str, Any]) -> tuple[ResearcherProfile, ...]:
    """Convert a roster document into researcher profiles, in document order."""
    roster = []
    for researcher_id, entry in basics.items():
        roster.append(
            ResearcherProfile(
                researcher_id=str(researcher_id),
                name=entry["name"],
                name_variants=tuple(entry.get("name_variants") or ()),
                orcid=entry.get("orcid") or None,
                arxiv_author_id=entry.get("arxiv_authorid") or None,
                tenure_start=_config_date(entry.get("date_in")),
                tenure_end=_config_date(entry.get("date_out")),
                status=entry.get("status") or "member",
            )
        )
    return tuple(roster)


def _config_date(value: str | None) -> date | None:
    return parse_date(value)


def _schema(file_name: str) -> dict[str, Any]:
    resource = files("pubreconcile") / "schemas" / _SCHEMAS[file_name]
    return json.loads(resource.read_text(encoding="utf-8"))


def _validate(document: Any, file_name: str) -> None:
    try:
        jsonschema.validate(instance=document, schema=_schema(file_name))
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"{file_name}: {e.message} (at {location})", file=file_name) from e


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path.name}: invalid JSON ({e})", file=path.name) from e


def load_config(
    config_dir: Path | str,
    *,
    title_match_threshold: float = DEFAULT_TITLE_THRESHOLD,
) -> ReconcileConfig:
    """Load and validate a config directory.

    Parameters
    ----------
    config_dir : Path | str
        Directory holding the JSON config files.
    title_match_threshold : float, optional
        Fuzzy citation match threshold.

    Returns
    -------
    ReconcileConfig
        Immutable configuration bundle.

    Raises
    ------
    ConfigError
        If a required file is missing, or any file is invalid.
    """
    config_dir = Path(config_dir)

    required: dict[str, Any] = {}
    for name in (BASICS_FILE, ABBREVIATIONS_FILE, PATTERNS_FILE):
        path = config_dir / name
        if not path.is_file():
            raise ConfigError(f"Required config file not found: {path}", file=name)
        required[name] = _read_json(path)

    optional: dict[str, Any] = {}
    for name in (HIGHLIGHTS_FILE, ORCID_OAUTH_FILE):
        path = config_dir / name
        optional[name] = _read_json(path) if path.is_file() else None

    return ReconcileConfig.from_mappings(
        required[BASICS_FILE],
        required[ABBREVIATIONS_FILE],
        required[PATTERNS_FILE],
        optional[HIGHLIGHTS_FILE],
        optional[ORCID_OAUTH_FILE],
        title_match_threshold=title_match_threshold,
    )
