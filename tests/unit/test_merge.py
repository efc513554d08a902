"""Tests for the merge engine and survivor selection."""

import json
from pathlib import Path

import pytest

from pubreconcile.audit.logger import AuditLogger
from pubreconcile.merge import (
    check_identity_invariants,
    group_records,
    is_complete,
    merge_records,
    merge_with_summary,
    select_survivor,
)
from pubreconcile.models import SourceOrigin

# ---------------------------------------------------------------------------
# Survivor selection
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    ("fields", "expected"),
    [
        pytest.param({"abstract": "A", "authors": "Alice Smith"}, True, id="abstract_authors"),
        pytest.param(
            {"citation_ref": "Nat. Phys. 1 (2020)", "native_id": "2101.1"},
            True,
            id="reference_native_id",
        ),
        pytest.param({"abstract": "A"}, False, id="abstract_only"),
        pytest.param({"authors": "Alice Smith", "native_id": "2101.1"}, False, id="no_content"),
        pytest.param(
            {"abstract": "A", "native_id": "1", "native_scheme": "hal"},
            False,
            id="non_arxiv_native_id",
        ),
    ],
)
def test_is_complete(make_record, fields: dict, expected: bool) -> None:
    """Test completeness needs content plus authors or an arXiv id."""
    assert is_complete(make_record(**fields)) is expected


@pytest.mark.unit
def test_select_survivor_complete_wins_regardless_of_order(make_record) -> None:
    """Test a complete record beats an incomplete one in either order."""
    bare = make_record(origin=SourceOrigin.PROFILE)
    full = make_record(abstract="Abstract", authors="Alice Smith")
    bare.arrival_index, full.arrival_index = 0, 1

    assert select_survivor([bare, full]) is full
    assert select_survivor([full, bare]) is full


@pytest.mark.unit
def test_select_survivor_all_incomplete_keeps_first_seen(make_record) -> None:
    """Test partial content does not outrank arrival among incomplete records."""
    authors_only = make_record(authors="Alice Smith")
    reference_only = make_record(citation_ref="Phys. Rev. B 1 (2021)")
    authors_only.arrival_index, reference_only.arrival_index = 0, 1

    assert select_survivor([authors_only, reference_only]) is authors_only
    assert select_survivor([reference_only, authors_only]) is authors_only


@pytest.mark.unit
def test_select_survivor_tie_goes_to_earliest_arrival(make_record) -> None:
    """Test equally complete records resolve to the first seen."""
    first = make_record(abstract="A", authors="Alice Smith")
    second = make_record(abstract="B", authors="Bob Jones")
    first.arrival_index, second.arrival_index = 3, 7

    assert select_survivor([second, first]) is first


@pytest.mark.unit
def test_select_survivor_empty_raises() -> None:
    """Test empty group raises ValueError."""
    with pytest.raises(ValueError, match="empty"):
        select_survivor([])


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_group_records_shared_persistent_id_joins_despite_native_conflict(make_record) -> None:
    """Test a shared DOI groups records even when their arXiv ids differ."""
    a = make_record("Paper", persistent_id="10.1000/x", native_id="2101.00001")
    b = make_record("Paper (v2)", persistent_id="10.1000/X", native_id="2101.00002")

    groups = group_records([a, b])

    assert groups == [[a, b]]


@pytest.mark.unit
def test_group_records_title_match_blocked_by_conflict(make_record) -> None:
    """Test a title match does not join a group holding a different DOI."""
    a = make_record("Same title", persistent_id="10.1000/a")
    b = make_record("Same title", persistent_id="10.1000/b")

    groups = group_records([a, b])

    assert len(groups) == 2


# ---------------------------------------------------------------------------
# merge_records
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_collapses_bare_and_url_persistent_id(make_record) -> None:
    """Test bare and resolver-URL spellings of one DOI collapse."""
    preprint = make_record(
        "Title A", persistent_id="10.1000/xyz", authors="Alice Smith", contributors={"alice"}
    )
    profile = make_record(
        "Title B",
        origin=SourceOrigin.PROFILE,
        persistent_id="https://doi.org/10.1000/XYZ",
        contributors={"bob"},
    )

    merged = merge_records([[preprint], [profile]])

    assert len(merged) == 1
    assert merged[0].contributing_researcher_ids == {"alice", "bob"}


@pytest.mark.unit
def test_merge_keeps_different_persistent_ids_apart(make_record) -> None:
    """Test identical titles with different DOIs stay separate."""
    a = make_record("Same title", persistent_id="10.1000/a")
    b = make_record("Same title", persistent_id="10.1000/b")

    merged = merge_records([[a], [b]])

    assert len(merged) == 2


@pytest.mark.unit
def test_merge_survivor_adopts_missing_identifiers(make_record) -> None:
    """Test the survivor takes a DOI it lacks from a discarded duplicate."""
    preprint = make_record(
        "Spin liquids in kagome magnets",
        native_id="2101.00001",
        abstract="We study spin liquids.",
        contributors={"alice"},
    )
    profile = make_record(
        "Spin Liquids in Kagome Magnets",
        origin=SourceOrigin.PROFILE,
        persistent_id="10.1000/kagome",
        contributors={"bob"},
    )

    merged = merge_records([[preprint], [profile]])

    assert len(merged) == 1
    survivor = merged[0]
    assert survivor.source_origin is SourceOrigin.PREPRINT
    assert survivor.persistent_id == "10.1000/kagome"
    assert survivor.native_id == "2101.00001"
    assert survivor.contributing_researcher_ids == {"alice", "bob"}


@pytest.mark.unit
def test_merge_output_order_follows_first_arrival(make_record) -> None:
    """Test survivors are ordered by the first arrival of their group."""
    a = make_record("Alpha")
    b = make_record("Beta")
    c = make_record("Gamma")
    b_dup = make_record("beta", origin=SourceOrigin.PROFILE, abstract="Abstract", authors="X Y")

    merged = merge_records([[a, b, c], [b_dup]])

    assert [r.title for r in merged] == ["Alpha", "beta", "Gamma"]
    assert [r.arrival_index for r in merged] == [0, 1, 2]


@pytest.mark.unit
def test_merge_is_idempotent(make_record) -> None:
    """Test merging an already merged set changes nothing."""
    records = [
        make_record("One", persistent_id="10.1000/one", contributors={"alice"}),
        make_record("Two", native_id="2101.00002", contributors={"alice"}),
        make_record("one", persistent_id="10.1000/ONE", contributors={"bob"}),
    ]

    first = merge_records([records])
    snapshot = [r.to_dict() for r in first]
    second = merge_records([first])

    assert len(second) == len(first) == 2
    assert [r.to_dict() for r in second] == snapshot


@pytest.mark.unit
def test_merge_empty_input() -> None:
    """Test empty input gives empty output."""
    assert merge_records([[], []]) == []


@pytest.mark.unit
def test_merge_with_summary_counts(make_record) -> None:
    """Test summary counters describe the collapse."""
    records = [
        make_record("One", persistent_id="10.1000/one"),
        make_record("one", persistent_id="10.1000/one"),
        make_record("One!", persistent_id="10.1000/one"),
        make_record("Two"),
    ]

    survivors, summary = merge_with_summary([records])

    assert len(survivors) == 2
    assert summary.records_in == 4
    assert summary.records_out == 2
    assert summary.groups_merged == 1
    assert summary.records_discarded == 2
    assert summary.largest_group == 3


@pytest.mark.unit
def test_merge_logs_merged_groups_and_summary(make_record, tmp_path: Path) -> None:
    """Test merge writes records_merged and merge_summary events."""
    records = [
        make_record("One", persistent_id="10.1000/one", contributors={"alice"}),
        make_record("One", persistent_id="10.1000/one", contributors={"bob"}),
    ]
    log_path = tmp_path / "events.jsonl"

    with AuditLogger("test_run", log_path) as logger:
        merge_records([records], logger=logger)

    events = [json.loads(line) for line in log_path.read_text().splitlines()]
    names = [e["event"] for e in events]
    assert names == ["records_merged", "merge_summary"]
    assert events[0]["data"]["group_size"] == 2
    assert events[0]["data"]["contributors"] == ["alice", "bob"]
    assert events[1]["data"]["records_out"] == 1


# ---------------------------------------------------------------------------
# Native-id uniqueness
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_strong_id_beats_earlier_title_match(make_record) -> None:
    """Test a shared arXiv id wins over a title match made earlier."""
    preprint = make_record("Kagome magnets", native_id="2101.00001", contributors={"alice"})
    other_work = make_record(
        "Kagome magnets", origin=SourceOrigin.PROFILE, persistent_id="10.1000/p"
    )
    published = make_record(
        "Kagome magnets (published version)",
        origin=SourceOrigin.PROFILE,
        persistent_id="10.1000/q",
        native_id="2101.00001",
        contributors={"bob"},
    )

    merged = merge_records([[preprint], [other_work, published]])

    assert len(merged) == 2
    first, second = merged
    assert first is preprint
    assert first.persistent_id == "10.1000/q"
    assert first.contributing_researcher_ids == {"alice", "bob"}
    assert second is other_work
    assert second.native_id is None
    check_identity_invariants(merged)


@pytest.mark.unit
def test_merge_does_not_adopt_native_id_held_elsewhere(make_record) -> None:
    """Test a survivor skips an accession another output record carries."""
    owner = make_record("Alpha", persistent_id="10.1000/a", native_id="2101.00001")
    bare = make_record("Gamma", contributors={"alice"})
    tagged = make_record(
        "gamma",
        origin=SourceOrigin.PROFILE,
        persistent_id="10.1000/r",
        native_id="2101.00001",
        contributors={"bob"},
    )

    merged = merge_records([[owner, bare], [tagged]])

    assert [r.title for r in merged] == ["Alpha", "Gamma"]
    assert merged[0].native_id == "2101.00001"
    assert merged[1].persistent_id == "10.1000/r"
    assert merged[1].native_id is None
    assert merged[1].contributing_researcher_ids == {"alice", "bob"}
    check_identity_invariants(merged)


@pytest.mark.unit
def test_merge_releases_accession_shared_by_distinct_works(
    make_record, tmp_path: Path
) -> None:
    """Test two works with different DOIs and one arXiv id keep it only once."""
    records = [
        make_record("Alpha", persistent_id="10.1000/a", native_id="2101.00001"),
        make_record("Beta", persistent_id="10.1000/b", native_id="2101.00001"),
    ]
    log_path = tmp_path / "events.jsonl"

    with AuditLogger("test_run", log_path) as logger:
        merged = merge_records([records], logger=logger)

    assert [r.native_id for r in merged] == ["2101.00001", None]
    assert merged[1].native_scheme is None
    events = [json.loads(line) for line in log_path.read_text().splitlines()]
    released = [e for e in events if e["event"] == "native_id_released"]
    assert len(released) == 1
    assert released[0]["level"] == "WARN"
    assert released[0]["data"]["native_id"] == "2101.00001"


@pytest.mark.unit
def test_merge_output_native_ids_are_unique(make_record) -> None:
    """Test no two merged records share an arXiv id."""
    records = [
        make_record("One", native_id="2101.00001", contributors={"alice"}),
        make_record("One", persistent_id="10.1000/one"),
        make_record("Two", persistent_id="10.1000/two", native_id="2101.00001"),
        make_record("Two", native_id="2102.00002"),
        make_record("Three", native_id="2102.00002", persistent_id="10.1000/three"),
    ]

    merged = merge_records([records])

    natives = [r.native_id for r in merged if r.native_id]
    assert len(natives) == len(set(natives))
    check_identity_invariants(merged)


# ---------------------------------------------------------------------------
# Weak title groups
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_title_group_all_incomplete_keeps_first_seen(make_record) -> None:
    """Test an equally incomplete title group keeps its first record."""
    first = make_record("Open quantum systems", authors="Alice Smith", contributors={"alice"})
    later = make_record(
        "Open Quantum Systems",
        origin=SourceOrigin.PROFILE,
        citation_ref="Phys. Rev. A 3, 4 (2020)",
        contributors={"bob"},
    )

    merged = merge_records([[first], [later]])

    (survivor,) = merged
    assert survivor is first
    assert survivor.citation_ref is None
    assert survivor.contributing_researcher_ids == {"alice", "bob"}
