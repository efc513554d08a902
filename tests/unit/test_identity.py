"""Tests for identity resolution between publication records."""

import pytest

from pubreconcile.errors import IdentityConflict
from pubreconcile.merge.identity import (
    check_identity_invariants,
    conflicts,
    identity_key,
    same_entity,
)
from pubreconcile.models import SourceOrigin

# ---------------------------------------------------------------------------
# same_entity
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    ("pid_a", "pid_b"),
    [
        pytest.param("10.1000/xyz", "10.1000/xyz", id="identical"),
        pytest.param("10.1000/xyz", "https://doi.org/10.1000/XYZ", id="resolver_url"),
        pytest.param("doi:10.1000/xyz", "10.1000/XYZ.", id="prefix_and_punctuation"),
    ],
)
def test_same_entity_persistent_id_spellings(make_record, pid_a: str, pid_b: str) -> None:
    """Test DOI spellings that normalize equal identify the same work."""
    a = make_record("First title", persistent_id=pid_a)
    b = make_record("Completely different title", persistent_id=pid_b)

    assert same_entity(a, b)
    assert not conflicts(a, b)


@pytest.mark.unit
def test_same_entity_different_persistent_ids_is_conclusive(make_record) -> None:
    """Test different DOIs are distinct even with identical titles."""
    a = make_record("Same title", persistent_id="10.1000/a")
    b = make_record("Same title", persistent_id="10.1000/b")

    assert not same_entity(a, b)
    assert conflicts(a, b)


@pytest.mark.unit
def test_same_entity_native_id_decides_without_persistent_ids(make_record) -> None:
    """Test arXiv ids decide when neither record has a DOI."""
    a = make_record("Title one", native_id="2101.00001")
    b = make_record("Title two", native_id="2101.00001")
    c = make_record("Title one", native_id="2101.00002")

    assert same_entity(a, b)
    assert not same_entity(a, c)
    assert conflicts(a, c)


@pytest.mark.unit
def test_same_entity_native_id_different_scheme_not_comparable(make_record) -> None:
    """Test native ids of different schemes fall through to the title."""
    a = make_record("Shared title", native_id="123", native_scheme="arxiv")
    b = make_record("Shared title", native_id="456", native_scheme="hal")

    assert same_entity(a, b)


@pytest.mark.unit
def test_same_entity_title_fallback_when_one_side_lacks_ids(make_record) -> None:
    """Test normalized titles decide when no strong id is comparable."""
    a = make_record("Quantum Dynamics: of Open Systems", persistent_id="10.1000/xyz")
    b = make_record("quantum dynamics of open systems", origin=SourceOrigin.PROFILE)

    assert same_entity(a, b)
    assert not conflicts(a, b)


@pytest.mark.unit
def test_same_entity_different_titles_without_ids(make_record) -> None:
    """Test records with different titles and no ids are distinct."""
    a = make_record("Spin liquids")
    b = make_record("Spin glasses")

    assert not same_entity(a, b)


# ---------------------------------------------------------------------------
# identity_key
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_identity_key_precedence(make_record) -> None:
    """Test key prefers persistent id, then native id, then title."""
    with_pid = make_record("T", persistent_id="https://doi.org/10.1000/ABC", native_id="2101.1")
    with_native = make_record("T", native_id="2101.00001")
    title_only = make_record("A Title!")

    assert identity_key(with_pid) == ("pid", "10.1000/abc")
    assert identity_key(with_native) == ("native", "arxiv", "2101.00001")
    assert identity_key(title_only) == ("title", "a title")


# ---------------------------------------------------------------------------
# check_identity_invariants
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_check_identity_invariants_passes_for_distinct_records(make_record) -> None:
    """Test no error for a duplicate-free set."""
    records = [
        make_record("One", persistent_id="10.1000/a"),
        make_record("Two", persistent_id="10.1000/b"),
        make_record("Three"),
    ]

    check_identity_invariants(records)


@pytest.mark.unit
def test_check_identity_invariants_shared_persistent_id(make_record) -> None:
    """Test two records sharing a DOI raise IdentityConflict."""
    records = [
        make_record("One", persistent_id="10.1000/a"),
        make_record("Two", persistent_id="https://doi.org/10.1000/A"),
    ]

    with pytest.raises(IdentityConflict) as exc_info:
        check_identity_invariants(records)

    assert exc_info.value.key == "10.1000/a"


@pytest.mark.unit
def test_check_identity_invariants_same_title(make_record) -> None:
    """Test two id-less records with the same title raise IdentityConflict."""
    records = [make_record("Same title"), make_record("same title")]

    with pytest.raises(IdentityConflict, match="same publication"):
        check_identity_invariants(records)


@pytest.mark.unit
def test_check_identity_invariants_shared_native_id(make_record) -> None:
    """Test two records with one arXiv id raise even when their DOIs differ."""
    records = [
        make_record("One", persistent_id="10.1000/a", native_id="2101.00001"),
        make_record("Two", persistent_id="10.1000/b", native_id="2101.00001"),
    ]

    with pytest.raises(IdentityConflict, match="native id") as exc_info:
        check_identity_invariants(records)

    assert exc_info.value.key == "arxiv:2101.00001"
