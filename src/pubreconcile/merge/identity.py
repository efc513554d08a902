"""Identity resolution: when do two records describe the same publication.

Identifier precedence:

1. Both records have a persistent id: equal ids mean the same work, and
   different ids are conclusive non-identity even when titles match.
2. Otherwise both have a native id of the same scheme: same rule.
3. Otherwise normalized titles decide. Title equality is weak and only
   consulted when no strong identifier is comparable across the pair.
"""

from collections.abc import Sequence

from pubreconcile.errors import IdentityConflict
from pubreconcile.models.records import PublicationRecord
from pubreconcile.normalize.identifiers import normalize_persistent_id, normalize_title

__all__ = [
    "identity_key",
    "pid_key",
    "native_key",
    "title_key",
    "same_entity",
    "conflicts",
    "strong_match",
    "check_identity_invariants",
]

IdentityKey = tuple[str, ...]


def pid_key(record: PublicationRecord) -> str | None:
    """Comparable persistent id, or None."""
    if not record.persistent_id:
        return None
    return normalize_persistent_id(record.persistent_id) or record.persistent_id.strip().casefold()


def native_key(record: PublicationRecord) -> tuple[str, str] | None:
    """Comparable (scheme, native id) pair, or None."""
    if not record.native_id:
        return None
    return (record.native_scheme or "", record.native_id.strip().casefold())


def title_key(record: PublicationRecord) -> str | None:
    """Normalized title, or None when nothing is left after normalization."""
    return normalize_title(record.title) or None


def identity_key(record: PublicationRecord) -> IdentityKey:
    """Compute the strongest available identity key.

    Parameters
    ----------
    record : PublicationRecord
        Record to key.

    Returns
    -------
    tuple[str, ...]
        ("pid", doi), ("native", scheme, id) or ("title", normalized title).
    """
    pid = pid_key(record)
    if pid:
        return ("pid", pid)
    native = native_key(record)
    if native:
        return ("native", *native)
    return ("title", title_key(record) or "")


def _strong_comparison(a: PublicationRecord, b: PublicationRecord) -> bool | None:
    # True/False when a strong identifier decides, None when none is comparable
    pid_a, pid_b = pid_key(a), pid_key(b)
    if pid_a and pid_b:
        return pid_a == pid_b

    native_a, native_b = native_key(a), native_key(b)
    if native_a and native_b and native_a[0] == native_b[0]:
        return native_a[1] == native_b[1]

    return None


def same_entity(a: PublicationRecord, b: PublicationRecord) -> bool:
    """Test whether two records refer to the same publication."""
    decided = _strong_comparison(a, b)
    if decided is not None:
        return decided
    title_a = title_key(a)
    return title_a is not None and title_a == title_key(b)


def conflicts(a: PublicationRecord, b: PublicationRecord) -> bool:
    """True when a strong identifier proves the records are different works."""
    return _strong_comparison(a, b) is False


def strong_match(a: PublicationRecord, b: PublicationRecord) -> bool:
    """True when a persistent id or same-scheme native id proves identity."""
    return _strong_comparison(a, b) is True


def check_identity_invariants(records: Sequence[PublicationRecord]) -> None:
    """Verify that no two records describe the same publication.

    Parameters
    ----------
    records : Sequence[PublicationRecord]
        Final record set.

    Raises
    ------
    IdentityConflict
        If two records share a persistent id, share a native id, or are
        ``same_entity``.
    """
    def native_label(record: PublicationRecord) -> str | None:
        native = native_key(record)
        return ":".join(native) if native else None

    for kind, key_of in (("persistent id", pid_key), ("native id", native_label)):
        seen: dict[str, int] = {}
        for i, record in enumerate(records):
            key = key_of(record)
            if key is None:
                continue
            if key in seen:
                raise IdentityConflict(
                    f"Records {seen[key]} and {i} share {kind} {key}",
                    key=key,
                )
            seen[key] = i

    for i, a in enumerate(records):
        for j in range(i + 1, len(records)):
            if same_entity(a, records[j]):
                raise IdentityConflict(
                    f"Records {i} and {j} describe the same publication",
                    key=a.label,
                )
