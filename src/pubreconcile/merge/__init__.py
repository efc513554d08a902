"""Identity resolution and duplicate suppression."""

from pubreconcile.merge.engine import group_records, merge_records, merge_with_summary
from pubreconcile.merge.identity import (
    check_identity_invariants,
    conflicts,
    identity_key,
    same_entity,
)
from pubreconcile.merge.models import MergeSummary
from pubreconcile.merge.survivor import is_complete, select_survivor

__all__ = [
    "merge_records",
    "merge_with_summary",
    "group_records",
    "identity_key",
    "same_entity",
    "conflicts",
    "check_identity_invariants",
    "is_complete",
    "select_survivor",
    "MergeSummary",
]
