"""Tests for identifier, name and journal reference normalization."""

import pytest

from pubreconcile.normalize import (
    NameNormalizer,
    ReferenceStandardizer,
    arxiv_id_from_url,
    build_derived_links,
    build_variant_map,
    find_doi_token,
    format_citation_ref,
    normalize_native_id,
    normalize_persistent_id,
    normalize_title,
    researchers_named_in,
    split_authors,
    trailing_year,
)

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param("10.1103/PhysRevB.1.2", "10.1103/physrevb.1.2", id="bare"),
        pytest.param("https://doi.org/10.1103/PhysRevB.1.2", "10.1103/physrevb.1.2", id="https"),
        pytest.param("http://dx.doi.org/10.1000/abc", "10.1000/abc", id="dx_resolver"),
        pytest.param("doi:10.1000/abc", "10.1000/abc", id="doi_prefix"),
        pytest.param("10.1000/a%2Fb", "10.1000/a/b", id="url_encoded"),
        pytest.param(" 10.1000/abc. ", "10.1000/abc", id="trailing_period"),
        pytest.param("10.1002/(SICI)1097", "10.1002/(sici)1097", id="parentheses_kept"),
        pytest.param("not a doi", None, id="not_doi"),
        pytest.param("", None, id="empty"),
        pytest.param(None, None, id="none"),
    ],
)
def test_normalize_persistent_id(raw: str | None, expected: str | None) -> None:
    """Test DOI normalization across common spellings."""
    assert normalize_persistent_id(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param("2101.00001v3", "2101.00001", id="version_suffix"),
        pytest.param("arXiv:2101.00001", "2101.00001", id="arxiv_prefix"),
        pytest.param("http://arxiv.org/abs/cond-mat/0101001v1", "cond-mat/0101001", id="old_url"),
        pytest.param("2101.00001", "2101.00001", id="plain"),
        pytest.param(None, None, id="none"),
    ],
)
def test_normalize_native_id(raw: str | None, expected: str | None) -> None:
    """Test arXiv accession normalization."""
    assert normalize_native_id(raw) == expected


@pytest.mark.unit
def test_arxiv_id_from_url() -> None:
    """Test accession extraction from abstract and PDF URLs."""
    assert arxiv_id_from_url("http://arxiv.org/abs/2101.00001v2") == "2101.00001"
    assert arxiv_id_from_url("https://arxiv.org/pdf/2101.00001v1.pdf") == "2101.00001"
    assert arxiv_id_from_url("https://example.org/2101.00001") is None


@pytest.mark.unit
def test_find_doi_token_in_free_text() -> None:
    """Test the first DOI-shaped token is found and normalized."""
    text = "A. Smith, Phys. Rev. B 1, 2 (2020), doi: 10.1103/PhysRevB.1.2; see also"

    assert find_doi_token(text) == "10.1103/physrevb.1.2"
    assert find_doi_token("no identifier here") is None


@pytest.mark.unit
def test_normalize_title() -> None:
    """Test title normalization for weak identity."""
    assert normalize_title("Spin-Liquids:  A Review!") == "spinliquids a review"
    assert normalize_title("Non-Markovian dynamics") == normalize_title("NonMarkovian Dynamics")
    assert normalize_title("Spin \u2013 orbit coupling") == "spin orbit coupling"
    assert normalize_title("ﬁne structure") == "fine structure"
    assert normalize_title(None) == ""


@pytest.mark.unit
def test_build_derived_links() -> None:
    """Test links are derived from identifiers only."""
    links = build_derived_links("10.1000/xyz", "2101.00001", "arxiv")

    assert links.primary_source_url == "https://arxiv.org/abs/2101.00001"
    assert links.primary_source_pdf_url == "https://arxiv.org/pdf/2101.00001"
    assert links.external_ref_url == "https://doi.org/10.1000/xyz"


@pytest.mark.unit
def test_build_derived_links_without_ids() -> None:
    """Test missing identifiers give empty links."""
    links = build_derived_links(None, "123", "hal")

    assert links.primary_source_url is None
    assert links.primary_source_pdf_url is None
    assert links.external_ref_url is None


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_split_authors_drops_empty_names() -> None:
    """Test splitting trims names and drops empty ones."""
    assert split_authors(" Alice Smith,, Bob Jones ,") == ["Alice Smith", "Bob Jones"]
    assert split_authors(None) == []


@pytest.mark.unit
def test_name_normalizer_replaces_variants(roster) -> None:
    """Test registered variants map to canonical names, order preserved."""
    normalizer = NameNormalizer(build_variant_map(roster))

    result = normalizer.normalize("B. Jones, C. Unknown, A. Smith")

    assert result == "Bob Jones, C. Unknown, Alice Smith"


@pytest.mark.unit
def test_name_normalizer_is_case_sensitive(roster) -> None:
    """Test variant matching is exact."""
    normalizer = NameNormalizer(build_variant_map(roster))

    assert normalizer.normalize("b. jones") == "b. jones"


@pytest.mark.unit
def test_name_normalizer_empty_input(roster) -> None:
    """Test empty author strings normalize to None."""
    normalizer = NameNormalizer(build_variant_map(roster))

    assert normalizer.normalize("") is None
    assert normalizer.normalize(" , ") is None


@pytest.mark.unit
def test_name_normalizer_is_idempotent(roster) -> None:
    """Test normalizing twice equals normalizing once."""
    normalizer = NameNormalizer(build_variant_map(roster))
    once = normalizer.normalize("R. Jones, A. Smith")

    assert normalizer.normalize(once) == once


@pytest.mark.unit
def test_researchers_named_in(roster) -> None:
    """Test researchers are found by canonical name substring."""
    assert researchers_named_in("Alice Smith, Carol White", roster) == {"alice"}
    assert researchers_named_in("A. Smith", roster) == set()
    assert researchers_named_in(None, roster) == set()


# ---------------------------------------------------------------------------
# Journal references
# ---------------------------------------------------------------------------


@pytest.fixture
def standardizer() -> ReferenceStandardizer:
    """Standardizer with one full-name entry and one variant pattern."""
    return ReferenceStandardizer(
        [("Physical Review Letters", "Phys. Rev. Lett."), ("Physical Review B", "Phys. Rev. B")],
        [(r"Phys\.?\s*Rev\.?\s*B", "Phys. Rev. B")],
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param(
            "Physical Review B 101, 1 (2020)", "Phys. Rev. B 101, 1 (2020)", id="full_name"
        ),
        pytest.param("physical review b 101 (2020)", "Phys. Rev. B 101 (2020)", id="case"),
        pytest.param("Phys Rev B 101 (2020)", "Phys. Rev. B 101 (2020)", id="pattern"),
        pytest.param(
            "Physical Review Letters 5 (2019)",
            "Phys. Rev. Lett. 5 (2019)",
            id="longer_name_first",
        ),
        pytest.param("Nature 1, 2 (2021)", "Nature 1, 2 (2021)", id="unlisted"),
    ],
)
def test_standardize_reference(
    standardizer: ReferenceStandardizer, raw: str, expected: str
) -> None:
    """Test both passes rewrite journal names."""
    assert standardizer.standardize(raw) == expected


@pytest.mark.unit
def test_standardize_reference_is_idempotent(standardizer: ReferenceStandardizer) -> None:
    """Test standardizing twice equals standardizing once."""
    once = standardizer.standardize("Physical Review B 101, 1 (2020)")

    assert standardizer.standardize(once) == once


@pytest.mark.unit
def test_standardize_reference_replacement_is_literal() -> None:
    """Test backslashes in replacements are not treated as group references."""
    std = ReferenceStandardizer([("Journal X", r"J. \1 X")], [])

    assert std.standardize("Journal X 1 (2020)") == r"J. \1 X 1 (2020)"


@pytest.mark.unit
def test_standardize_reference_empty(standardizer: ReferenceStandardizer) -> None:
    """Test empty input is returned unchanged."""
    assert standardizer.standardize(None) is None
    assert standardizer.standardize("") == ""


@pytest.mark.unit
@pytest.mark.parametrize(
    ("args", "expected"),
    [
        pytest.param(
            ("Nat. Phys.", "16", "3", "100-105", 2020),
            "Nat. Phys. 16(3), 100-105 (2020)",
            id="full",
        ),
        pytest.param(
            ("Nat. Phys.", None, "3", None, 2020), "Nat. Phys. (2020)", id="issue_without_volume"
        ),
        pytest.param(("Nat. Phys.", "16", None, None, None), "Nat. Phys. 16", id="volume_only"),
        pytest.param((None, None, None, None, 2020), "(2020)", id="year_only"),
        pytest.param((None, "1", None, None, None), None, id="nothing_usable"),
    ],
)
def test_format_citation_ref(args: tuple, expected: str | None) -> None:
    """Test reference formatting from structured fields."""
    assert format_citation_ref(*args) == expected


@pytest.mark.unit
def test_trailing_year() -> None:
    """Test the year is read from a trailing parenthesized group only."""
    assert trailing_year("Phys. Rev. B 1, 2 (2019)") == 2019
    assert trailing_year("Phys. Rev. B (2019) 1, 2") is None
    assert trailing_year(None) is None
