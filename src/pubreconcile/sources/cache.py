"""Raw-source cache files.

Each source keeps one JSON file in the data directory, shaped
``{researcher_id: {"name": ..., "entries": [...]}}``. The merge step
can rerun from these files without touching the network.
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pubreconcile.models.records import ResearcherProfile

__all__ = ["PREPRINT_CACHE_FILE", "PROFILE_CACHE_FILE", "write_source_cache", "read_source_cache"]

PREPRINT_CACHE_FILE = "arxiv_publications.json"
PROFILE_CACHE_FILE = "orcid_publications.json"


class _Serializable(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


T = TypeVar("T")


def write_source_cache(
    path: Path | str,
    roster: Sequence[ResearcherProfile],
    entries_by_researcher: Mapping[str, Sequence[_Serializable]],
) -> int:
    """Write fetched entries to a cache file.

    Parameters
    ----------
    path : Path | str
        Cache file.
    roster : Sequence[ResearcherProfile]
        Roster, used for display names and ordering.
    entries_by_researcher : Mapping[str, Sequence]
        Entries keyed by researcher id. Researchers absent from the mapping
        are not written.

    Returns
    -------
    int
        Number of entries written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {}
    count = 0
    for researcher in roster:
        entries = entries_by_researcher.get(researcher.researcher_id)
        if entries is None:
            continue
        data[researcher.researcher_id] = {
            "name": researcher.name,
            "entries": [entry.to_dict() for entry in entries],
        }
        count += len(entries)

    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return count


def read_source_cache(path: Path | str, entry_type: type[T]) -> dict[str, list[T]]:
    """Read a cache file into typed entries.

    A missing file reads as an empty cache.

    Parameters
    ----------
    path : Path | str
        Cache file.
    entry_type : type
        Entry class with a ``from_dict`` constructor
        (``PreprintEntry`` or ``ProfileWork``).

    Returns
    -------
    dict[str, list[T]]
        Entries keyed by researcher id, in file order.
    """
    path = Path(path)
    if not path.is_file():
        return {}

    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    return {
        str(rid): [entry_type.from_dict(e) for e in (block or {}).get("entries") or []]
        for rid, block in data.items()
    }
