"""Normalization of names, references, identifiers and titles."""

from pubreconcile.normalize.identifiers import (
    ARXIV_SCHEME,
    arxiv_id_from_url,
    build_derived_links,
    find_doi_token,
    normalize_native_id,
    normalize_persistent_id,
    normalize_title,
)
from pubreconcile.normalize.names import (
    NameNormalizer,
    build_variant_map,
    join_authors,
    researchers_named_in,
    split_authors,
)
from pubreconcile.normalize.references import (
    ReferenceStandardizer,
    format_citation_ref,
    trailing_year,
)

__all__ = [
    "ARXIV_SCHEME",
    "normalize_persistent_id",
    "normalize_native_id",
    "arxiv_id_from_url",
    "find_doi_token",
    "normalize_title",
    "build_derived_links",
    "NameNormalizer",
    "build_variant_map",
    "split_authors",
    "join_authors",
    "researchers_named_in",
    "ReferenceStandardizer",
    "format_citation_ref",
    "trailing_year",
]
