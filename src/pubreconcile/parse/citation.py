"""Citation-text sub-parser for BibTeX and RIS snippets.

Profile works without DOI or arXiv ids sometimes carry the citation the
author pasted into their profile. This module pulls authors, a formatted
journal reference and a DOI out of it.

BibTeX: ``key = {value}`` / ``key = "value"`` / ``key = bare`` fields,
authors separated by the literal " and ".
RIS: two-character tags, ``AU  - value``.
Anything else, or a snippet that does not parse structurally, goes to a
fallback that only looks for a DOI-shaped token.
"""

import re

from pubreconcile.errors import MalformedCitationText
from pubreconcile.models.sources import CitationFields
from pubreconcile.normalize.identifiers import find_doi_token, normalize_persistent_id
from pubreconcile.normalize.references import format_citation_ref

__all__ = ["parse_citation", "parse_bibtex_citation", "parse_ris_citation"]

FIELD_START_PATTERN = re.compile(r"(\w+)\s*=\s*")
TAG_PATTERN = re.compile(r"^([A-Z][A-Z0-9])  - ?(.*)$")
YEAR_PATTERN = re.compile(r"\d{4}")


def parse_citation(text: str | None, fmt: str | None) -> CitationFields:
    """Extract authors, journal reference and DOI from citation text.

    Parameters
    ----------
    text : str | None
        Raw citation text.
    fmt : str | None
        Format tag ("bibtex", "ris", or anything else).

    Returns
    -------
    CitationFields
        Extracted fields; all None when nothing was found. Never raises.
    """
    if not text:
        return CitationFields()

    fmt = (fmt or "").strip().lower()
    try:
        if fmt == "bibtex":
            return parse_bibtex_citation(text)
        if fmt == "ris":
            return parse_ris_citation(text)
    except MalformedCitationText:
        pass
    return _parse_fallback(text)


# ---------------------------------------------------------------------------
# BibTeX
# ---------------------------------------------------------------------------


def parse_bibtex_citation(text: str) -> CitationFields:
    """Parse a BibTeX entry.

    Raises
    ------
    MalformedCitationText
        If no ``key = value`` field can be read.
    """
    fields = _parse_bibtex_fields(text)
    if not fields:
        raise MalformedCitationText("no BibTeX fields found")

    authors = None
    if fields.get("author"):
        names = [" ".join(a.split()) for a in fields["author"].split(" and ")]
        authors = ", ".join(n for n in names if n) or None

    container = fields.get("journal") or fields.get("booktitle")
    citation_ref = format_citation_ref(
        container,
        volume=fields.get("volume"),
        issue=fields.get("number"),
        pages=fields.get("pages"),
        year=fields.get("year"),
    )

    return CitationFields(
        authors=authors,
        citation_ref=citation_ref,
        persistent_id=normalize_persistent_id(fields.get("doi")),
    )


def _parse_bibtex_fields(text: str) -> dict[str, str]:
    # Field scanning starts after the "@type{key," header when present
    body_start = 0
    if text.lstrip().startswith("@"):
        comma = text.find(",")
        if comma == -1:
            raise MalformedCitationText("BibTeX entry has no fields")
        body_start = comma + 1

    content = text[body_start:]
    fields: dict[str, str] = {}

    i = 0
    while i < len(content):
        match = FIELD_START_PATTERN.match(content, i)
        if not match:
            i += 1
            continue

        name = match.group(1).lower()
        i = match.end()
        if i >= len(content):
            break

        if content[i] == "{":
            value, i = _parse_braced_value(content, i)
        elif content[i] == '"':
            value, i = _parse_quoted_value(content, i)
        else:
            value, i = _parse_bare_value(content, i)

        value = " ".join(value.split())
        if value and name not in fields:
            fields[name] = value

    return fields


def _parse_braced_value(content: str, start: int) -> tuple[str, int]:
    brace_depth = 0
    value_chars: list[str] = []
    i = start

    while i < len(content):
        char = content[i]
        if char == "{":
            brace_depth += 1
            if brace_depth > 1:
                value_chars.append(char)
        elif char == "}":
            brace_depth -= 1
            if brace_depth == 0:
                return _strip_braces("".join(value_chars)), i + 1
            value_chars.append(char)
        else:
            value_chars.append(char)
        i += 1

    raise MalformedCitationText("unbalanced braces in BibTeX value")


def _parse_quoted_value(content: str, start: int) -> tuple[str, int]:
    i = start + 1
    value_chars: list[str] = []
    escape_next = False

    while i < len(content):
        char = content[i]
        if escape_next:
            value_chars.append(char)
            escape_next = False
        elif char == "\\":
            escape_next = True
        elif char == '"':
            return _strip_braces("".join(value_chars)), i + 1
        else:
            value_chars.append(char)
        i += 1

    raise MalformedCitationText("unterminated quoted BibTeX value")


def _parse_bare_value(content: str, start: int) -> tuple[str, int]:
    value_chars: list[str] = []
    i = start

    while i < len(content) and content[i] not in ",\n}":
        value_chars.append(content[i])
        i += 1

    return "".join(value_chars).strip(), i


def _strip_braces(value: str) -> str:
    # Case-protection braces: {{Q}}uantum -> Quantum
    return value.replace("{", "").replace("}", "")


# ---------------------------------------------------------------------------
# RIS
# ---------------------------------------------------------------------------


def parse_ris_citation(text: str) -> CitationFields:
    """Parse an RIS record.

    Raises
    ------
    MalformedCitationText
        If no tagged line is found.
    """
    authors: list[str] = []
    journal = volume = issue = start_page = end_page = year = doi = None
    tagged = 0

    for line in text.splitlines():
        match = TAG_PATTERN.match(line.strip())
        if not match:
            continue
        tagged += 1
        tag, value = match.group(1), match.group(2).strip()
        if not value:
            continue

        if tag in ("AU", "A1"):
            authors.append(value)
        elif tag in ("JO", "T2") and journal is None:
            journal = value
        elif tag == "VL":
            volume = value
        elif tag == "IS":
            issue = value
        elif tag == "SP":
            start_page = value
        elif tag == "EP":
            end_page = value
        elif tag in ("PY", "Y1") and year is None:
            year_match = YEAR_PATTERN.match(value)
            year = year_match.group(0) if year_match else None
        elif tag == "DO":
            doi = value

    if tagged == 0:
        raise MalformedCitationText("no RIS tags found")

    pages = start_page
    if start_page and end_page:
        pages = f"{start_page}-{end_page}"

    citation_ref = None
    if journal:
        citation_ref = format_citation_ref(journal, volume, issue, pages, year)

    return CitationFields(
        authors=", ".join(authors) or None,
        citation_ref=citation_ref,
        persistent_id=normalize_persistent_id(doi),
    )


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


def _parse_fallback(text: str) -> CitationFields:
    return CitationFields(persistent_id=find_doi_token(text))
