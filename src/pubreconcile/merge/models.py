"""Data models for the merge engine."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class MergeSummary:
    """Summary statistics for one merge pass.

    Attributes
    ----------
    records_in : int
        Records ingested.
    records_out : int
        Records after duplicate suppression.
    groups_merged : int
        Identity groups with more than one member.
    records_discarded : int
        Non-survivors dropped.
    largest_group : int
        Size of the largest identity group.
    """

    records_in: int
    records_out: int
    groups_merged: int
    records_discarded: int
    largest_group: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
