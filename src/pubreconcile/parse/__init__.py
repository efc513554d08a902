"""Parsers for citation text embedded in source records."""

from pubreconcile.parse.citation import (
    parse_bibtex_citation,
    parse_citation,
    parse_ris_citation,
)

__all__ = ["parse_citation", "parse_bibtex_citation", "parse_ris_citation"]
