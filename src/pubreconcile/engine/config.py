"""Pipeline configuration and result dataclasses."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from pubreconcile.config import DEFAULT_TITLE_THRESHOLD
from pubreconcile.enrich.scheduling import SchedulingPolicy

OUTPUT_FILE = "publications.json"


@dataclass
class PipelineConfig:
    """Configuration for a complete reconciliation run.

    Attributes
    ----------
    config_dir : Path
        Directory holding basics.json and the journal tables.
    data_dir : Path
        Directory for the source caches and the output file.
    output_path : Path | None
        Output file. If None, ``data_dir / "publications.json"``.
    fetch_preprints : bool
        Refresh the arXiv cache before merging.
    fetch_profiles : bool
        Refresh the ORCID cache before merging.
    offline : bool
        Skip every enrichment lookup; merge cached data only.
    max_concurrency : int
        Records enriched concurrently (default: 4).
    request_delay_seconds : float
        Minimum spacing between calls to one host (default: 0.5).
    request_timeout_seconds : float
        Per-call timeout (default: 10).
    title_match_threshold : float
        Fuzzy citation match threshold, compared with ``>`` (default: 0.6).
    crossref_mailto : str | None
        Contact address sent to Crossref.
    """

    config_dir: Path = Path("config")
    data_dir: Path = Path("data")
    output_path: Path | None = None
    fetch_preprints: bool = True
    fetch_profiles: bool = True
    offline: bool = False
    max_concurrency: int = 4
    request_delay_seconds: float = 0.5
    request_timeout_seconds: float = 10.0
    title_match_threshold: float = DEFAULT_TITLE_THRESHOLD
    crossref_mailto: str | None = None

    def __post_init__(self) -> None:
        """Set defaults and validate."""
        self.config_dir = Path(self.config_dir)
        self.data_dir = Path(self.data_dir)
        if self.output_path is None:
            self.output_path = self.data_dir / OUTPUT_FILE
        else:
            self.output_path = Path(self.output_path)

        if not 0.0 <= self.title_match_threshold <= 1.0:
            raise ValueError(
                f"title_match_threshold must be in [0, 1], got {self.title_match_threshold}"
            )

        # Raises ValueError on invalid limits
        self.scheduling_policy()

    def scheduling_policy(self) -> SchedulingPolicy:
        """Scheduling limits for enrichment lookups."""
        return SchedulingPolicy(
            max_concurrency=self.max_concurrency,
            request_delay_seconds=self.request_delay_seconds,
            request_timeout_seconds=self.request_timeout_seconds,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["config_dir"] = str(self.config_dir)
        data["data_dir"] = str(self.data_dir)
        data["output_path"] = str(self.output_path)
        return data


@dataclass
class PipelineResult:
    """Results from pipeline execution.

    Attributes
    ----------
    success : bool
        Whether the pipeline completed successfully.
    researchers : int
        Researchers in the roster.
    preprint_entries : int
        Entries read from the arXiv cache.
    profile_entries : int
        Entries read from the ORCID cache.
    records_out : int
        Records written to the output file.
    output_files : dict[str, str]
        Map of artifact type to file path.
    error_message : str | None
        Error message if failed.
    """

    success: bool
    researchers: int = 0
    preprint_entries: int = 0
    profile_entries: int = 0
    records_out: int = 0
    output_files: dict[str, str] = field(default_factory=dict)
    error_message: str | None = None

    @property
    def records_in(self) -> int:
        """Source entries fed into the merge."""
        return self.preprint_entries + self.profile_entries

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["records_in"] = self.records_in
        return data
