"""Map arbitrary spreadsheet headers onto canonical field names."""

import re
from typing import Optional

from estatepulse.models.csv_import import HeaderResolution, ParsedRow
from estatepulse.utils.errors import MissingColumnsError

_SEPARATORS = re.compile(r"[^a-z0-9]")


def _compact(text: str) -> str:
    return _SEPARATORS.sub("", text.lower())


def unique_headers(raw_headers: list[str], width: Optional[int] = None) -> list[str]:
    """
    Lower-case, fill and de-duplicate a header row.

    Empty headers (and columns beyond the header row, up to width) become
    column_<index>; repeats get _1, _2... suffixes. An already unique,
    lower-cased list comes back unchanged.
    """
    total = max(len(raw_headers), width or 0)
    seen: set[str] = set()
    headers: list[str] = []

    for index in range(total):
        raw = raw_headers[index] if index < len(raw_headers) else ""
        name = raw.strip().lower() or f"column_{index}"
        candidate = name
        suffix = 1
        while candidate in seen:
            candidate = f"{name}_{suffix}"
            suffix += 1
        seen.add(candidate)
        headers.append(candidate)

    return headers


def header_matches(header: str, terms: list[str]) -> bool:
    """True when the header contains any of the terms (case and separator insensitive)."""
    lowered = header.lower()
    compact = _compact(header)
    for term in terms:
        term = term.strip().lower()
        if not term:
            continue
        if term in lowered:
            return True
        compact_term = _compact(term)
        if compact_term and compact_term in compact:
            return True
    return False


def _first_match(headers: list[str], terms: list[str]) -> Optional[int]:
    return next((index for index, header in enumerate(headers) if header_matches(header, terms)), None)


def resolve_headers(
    raw_headers: list[str],
    expected_headers: list[str],
    aliases: Optional[dict[str, list[str]]] = None,
    width: Optional[int] = None,
    require_expected: bool = True,
) -> HeaderResolution:
    """
    Resolve every canonical field to the first matching column, left to right.

    Fields are the expected headers plus every alias dictionary key. A column
    containing the canonical name beats any alias match, so "Status" wins over
    an earlier "Stage" and "Price" over an earlier "Assessed Value". Raises
    MissingColumnsError when expected headers were given and none resolved;
    partial resolution is fine.
    """
    headers = unique_headers(raw_headers, width)
    alias_map = {key.strip().lower(): list(terms) for key, terms in (aliases or {}).items()}

    fields = [h.strip().lower() for h in expected_headers]
    fields += [key for key in alias_map if key not in fields]

    field_columns: dict[str, Optional[int]] = {}
    for field in fields:
        field_columns[field] = _first_match(headers, [field])
        if field_columns[field] is None:
            field_columns[field] = _first_match(headers, alias_map.get(field, []))

    if require_expected and expected_headers:
        if not any(field_columns[h.strip().lower()] is not None for h in expected_headers):
            raise MissingColumnsError(expected_headers, headers)

    return HeaderResolution(headers=headers, field_columns=field_columns)


def rows_to_records(headers: list[str], rows: list[list[str]]) -> list[ParsedRow]:
    """Key each data row by header; short rows are padded with empty cells."""
    return [
        {header: (row[index] if index < len(row) else "") for index, header in enumerate(headers)}
        for row in rows
    ]


def is_blank_row(row: ParsedRow) -> bool:
    return not any(value.strip() for value in row.values())
