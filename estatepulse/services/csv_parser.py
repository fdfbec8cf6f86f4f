"""Quote-aware CSV parser for spreadsheet exports."""

from typing import Optional

from estatepulse.utils.errors import NoDataError
from estatepulse.utils.import_config import ImportConfig


def parse_csv(text: str, escape_doubled_quotes: Optional[bool] = None) -> list[list[str]]:
    """
    Split delimited text into rows of trimmed cells.

    Commas and line breaks inside double quotes are kept as content. With
    escape_doubled_quotes (the default, see CSV_RFC4180_QUOTES) a doubled
    quote inside a quoted field is a literal quote character; without it every
    quote simply toggles quoting. Blank lines produce no row.
    """
    if escape_doubled_quotes is None:
        escape_doubled_quotes = ImportConfig.CSV_RFC4180_QUOTES

    if text.startswith("\ufeff"):
        text = text[1:]

    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if char == '"':
            if escape_doubled_quotes and in_quotes and i + 1 < length and text[i + 1] == '"':
                field.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            row.append("".join(field).strip())
            field = []
        elif char in "\r\n" and not in_quotes:
            cell = "".join(field).strip()
            if cell or row:
                row.append(cell)
                rows.append(row)
            row = []
            field = []
        else:
            field.append(char)
        i += 1

    cell = "".join(field).strip()
    if cell or row:
        row.append(cell)
        rows.append(row)

    return rows


def split_header(rows: list[list[str]]) -> tuple[list[str], list[list[str]]]:
    """Return (header row, data rows); a file needs a header and one data row."""
    if len(rows) < 2:
        raise NoDataError("File is empty or missing data rows.")
    return rows[0], rows[1:]
