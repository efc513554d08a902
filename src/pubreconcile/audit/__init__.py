"""Audit logging subsystem for pubreconcile.

Main Components
---------------
- AuditLogger: JSONL event logger
- generate_run_id: run identifier factory
"""

from pubreconcile.audit.helpers import generate_run_id, get_package_version
from pubreconcile.audit.logger import LEVELS, AuditLogger
from pubreconcile.utils import get_iso_timestamp

__all__ = [
    "AuditLogger",
    "LEVELS",
    "generate_run_id",
    "get_package_version",
    "get_iso_timestamp",
]
