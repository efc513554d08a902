"""Source record adapters.

Adapters are the only code that sees source-specific shapes; everything
downstream works on ``PublicationRecord``.
"""

from pubreconcile.adapters.citation import BOOK_WORK_TYPES, candidate_record, infer_citation_ref
from pubreconcile.adapters.preprint import adapt_preprint_entries, preprint_record
from pubreconcile.adapters.profile import adapt_profile_works, profile_record

__all__ = [
    "BOOK_WORK_TYPES",
    "candidate_record",
    "infer_citation_ref",
    "preprint_record",
    "adapt_preprint_entries",
    "profile_record",
    "adapt_profile_works",
]
