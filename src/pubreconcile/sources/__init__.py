"""Fetching and caching of raw per-researcher source entries."""

from pubreconcile.sources.cache import (
    PREPRINT_CACHE_FILE,
    PROFILE_CACHE_FILE,
    read_source_cache,
    write_source_cache,
)
from pubreconcile.sources.fetch import (
    SourceEntry,
    SourceFetcher,
    check_fetchable,
    fetch_source_records,
)
from pubreconcile.sources.tenure import should_include_publication

__all__ = [
    "fetch_source_records",
    "check_fetchable",
    "SourceFetcher",
    "SourceEntry",
    "should_include_publication",
    "read_source_cache",
    "write_source_cache",
    "PREPRINT_CACHE_FILE",
    "PROFILE_CACHE_FILE",
]
