"""Merge engine: fold records from all sources into one duplicate-free set.

The same function runs twice in a reconciliation pass: once over the
adapted source records and once more after enrichment, because
enrichment can give two previously distinct records the same persistent
id. Merging is idempotent, so the second call leaves an already
duplicate-free set unchanged.
"""

from collections import defaultdict
from collections.abc import Hashable, Iterable

from pubreconcile.audit.logger import AuditLogger
from pubreconcile.merge.identity import (
    conflicts,
    native_key,
    pid_key,
    same_entity,
    strong_match,
    title_key,
)
from pubreconcile.merge.models import MergeSummary
from pubreconcile.merge.survivor import select_survivor
from pubreconcile.models.records import PublicationRecord

__all__ = ["merge_records", "merge_with_summary", "group_records"]


def _assign_arrival(records: list[PublicationRecord]) -> None:
    # Indices survive re-runs; only new records are numbered
    next_index = max((r.arrival_index for r in records), default=-1) + 1
    for record in records:
        if record.arrival_index < 0:
            record.arrival_index = next_index
            next_index += 1


def _strong_keys(record: PublicationRecord) -> list[Hashable]:
    keys: list[Hashable] = []
    pid = pid_key(record)
    if pid:
        keys.append(("pid", pid))
    native = native_key(record)
    if native:
        keys.append(("native", *native))
    return keys


def _joins(record: PublicationRecord, members: list[PublicationRecord]) -> bool:
    pid = pid_key(record)
    # A shared persistent id is conclusive whatever other ids say
    if pid and any(pid_key(m) == pid for m in members):
        return True
    if any(conflicts(record, m) for m in members):
        return False
    return any(strong_match(record, m) for m in members)


def _group_by_strong_ids(records: list[PublicationRecord]) -> list[list[PublicationRecord]]:
    groups: list[list[PublicationRecord]] = []
    index: dict[Hashable, list[int]] = defaultdict(list)

    for record in records:
        keys = _strong_keys(record)
        candidates = sorted({g for key in keys for g in index.get(key, ())})
        target = next((g for g in candidates if _joins(record, groups[g])), None)
        if target is None:
            target = len(groups)
            groups.append([])

        groups[target].append(record)
        for key in keys:
            if target not in index[key]:
                index[key].append(target)

    return groups


def group_records(records: Iterable[PublicationRecord]) -> list[list[PublicationRecord]]:
    """Partition records into identity groups.

    Grouping runs in two passes so that a weak title match can never
    claim a record that a strong identifier ties elsewhere:

    1. Records are grouped by persistent id and same-scheme native id. A
       record joins the earliest group holding a strong match and no
       conflicting member. A shared persistent id always joins.
    2. Groups are then folded together by normalized title, in order of
       their first member, when some pair of members is ``same_entity``
       and no pair ``conflicts``.

    Parameters
    ----------
    records : Iterable[PublicationRecord]
        Records in arrival order.

    Returns
    -------
    list[list[PublicationRecord]]
        Groups in order of their first member, members in input order.
    """
    records = list(records)
    position = {id(record): i for i, record in enumerate(records)}

    merged: list[list[PublicationRecord]] = []
    title_index: dict[str, list[int]] = defaultdict(list)

    for group in _group_by_strong_ids(records):
        titles = {t for t in (title_key(m) for m in group) if t}
        candidates = sorted({g for t in titles for g in title_index.get(t, ())})

        target: int | None = None
        for g in candidates:
            existing = merged[g]
            if any(conflicts(a, b) for a in group for b in existing):
                continue
            if any(same_entity(a, b) for a in group for b in existing):
                target = g
                break

        if target is None:
            target = len(merged)
            merged.append([])

        merged[target].extend(group)
        for t in titles:
            if target not in title_index[t]:
                title_index[t].append(target)

    for group in merged:
        group.sort(key=lambda r: position[id(r)])
    return merged


def _collapse_group(
    group: list[PublicationRecord], foreign_native: set[tuple[str, str]]
) -> PublicationRecord:
    survivor = select_survivor(group)
    if len(group) == 1:
        return survivor

    for member in group:
        if member is survivor:
            continue
        survivor.contributing_researcher_ids |= member.contributing_researcher_ids
        if not survivor.persistent_id and member.persistent_id:
            survivor.persistent_id = member.persistent_id
        # Never adopt an accession another group already carries
        if (
            not survivor.native_id
            and member.native_id
            and native_key(member) not in foreign_native
        ):
            survivor.native_id = member.native_id
            survivor.native_scheme = member.native_scheme

    survivor.arrival_index = min(m.arrival_index for m in group)
    return survivor


def _release_shared_native_ids(
    survivors: list[PublicationRecord], logger: AuditLogger | None
) -> None:
    # Two works with different persistent ids can cite one accession;
    # the earlier record keeps it
    owners: dict[tuple[str, str], PublicationRecord] = {}
    for record in survivors:
        native = native_key(record)
        if native is None:
            continue
        if native not in owners:
            owners[native] = record
            continue
        if logger:
            logger.event(
                "native_id_released",
                data={"native_id": record.native_id, "kept_by": owners[native].label},
                level="WARN",
                rid=record.label,
            )
        record.native_id = None
        record.native_scheme = None


def merge_with_summary(
    source_record_sets: Iterable[Iterable[PublicationRecord]],
    *,
    logger: AuditLogger | None = None,
) -> tuple[list[PublicationRecord], MergeSummary]:
    """Merge record sets and report what was collapsed.

    Parameters
    ----------
    source_record_sets : Iterable[Iterable[PublicationRecord]]
        One iterable of records per source, in arrival order.
    logger : AuditLogger | None, optional
        Audit logger.

    Returns
    -------
    tuple[list[PublicationRecord], MergeSummary]
        Survivors in order of their group's first arrival, and the summary.
    """
    records = [record for record_set in source_record_sets for record in record_set]
    _assign_arrival(records)

    groups = group_records(records)
    carriers: dict[tuple[str, str], set[int]] = defaultdict(set)
    for g, group in enumerate(groups):
        for member in group:
            native = native_key(member)
            if native:
                carriers[native].add(g)
    survivors = [
        _collapse_group(group, {k for k, gs in carriers.items() if gs - {g}})
        for g, group in enumerate(groups)
    ]
    _release_shared_native_ids(survivors, logger)

    merged_groups = [g for g in groups if len(g) > 1]
    summary = MergeSummary(
        records_in=len(records),
        records_out=len(survivors),
        groups_merged=len(merged_groups),
        records_discarded=len(records) - len(survivors),
        largest_group=max((len(g) for g in groups), default=0),
    )

    if logger:
        for group, survivor in zip(groups, survivors, strict=True):
            if len(group) > 1:
                logger.event(
                    "records_merged",
                    data={
                        "group_size": len(group),
                        "discarded": [m.label for m in group if m is not survivor],
                        "contributors": sorted(survivor.contributing_researcher_ids),
                    },
                    level="DEBUG",
                    rid=survivor.label,
                )
        logger.event("merge_summary", data=summary.to_dict())

    return survivors, summary


def merge_records(
    source_record_sets: Iterable[Iterable[PublicationRecord]],
    *,
    logger: AuditLogger | None = None,
) -> list[PublicationRecord]:
    """Fold records from all sources into one duplicate-free list.

    Survivors are chosen by ``select_survivor``. Contributor sets of
    discarded duplicates are unioned into the survivor, and persistent or
    native ids the survivor lacks are adopted from the group.

    Parameters
    ----------
    source_record_sets : Iterable[Iterable[PublicationRecord]]
        One iterable of records per source, in arrival order.
    logger : AuditLogger | None, optional
        Audit logger.

    Returns
    -------
    list[PublicationRecord]
        Survivors in order of their group's first arrival.
    """
    survivors, _ = merge_with_summary(source_record_sets, logger=logger)
    return survivors
