from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models.import_result import ImportFailure, ImportWarning, WarningKind
from ..normalize.fields import title_case_words

"""Delimited text parsing: lines, header canonicalization and raw records.

Values stay strings here; typing is the normalizers' job.
"""

__all__ = [
    "HEADER_SYNONYMS",
    "ParsedCsv",
    "TooFewLinesError",
    "canonicalize_header",
    "parse_records",
    "split_delimited_line",
    "split_lines",
]


class TooFewLinesError(ImportFailure):
    """Raised when the input has no room for a header plus one data line."""
    code = "TOO_FEW_LINES"


HEADER_SYNONYMS: dict[str, str] = {
    "assembly no": "Assembly Number",
    "assembly num": "Assembly Number",
    "asm number": "Assembly Number",
    "asm no": "Assembly Number",
    "product desc": "Product Description",
    "prod code": "Product Code",
    "prod desc": "Product Description",
    "qty": "Assembled Quantity",
    "quantity": "Assembled Quantity",
    "assembled qty": "Assembled Quantity",
}

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass
class ParsedCsv:
    headers: list[str]
    records: list[dict[str, str]]  # canonical header -> raw string
    warnings: list[ImportWarning] = field(default_factory=list)


def split_lines(raw: str | bytes) -> list[str]:
    """Split raw text into trimmed, non-blank lines (UTF-8 BOM removed)."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if raw.startswith("\ufeff"):
        raw = raw[1:]
    return [s for s in (line.strip() for line in _LINE_BREAK.split(raw)) if s]


def canonicalize_header(cell: str) -> str:
    name = cell.replace('"', "").strip()
    mapped = HEADER_SYNONYMS.get(name.lower())
    if mapped is not None:
        return mapped
    return title_case_words(name)


def split_delimited_line(line: str) -> list[str]:
    """Split one data line on commas outside double quotes.

    A '"' toggles the quoted state and is not copied into the value; the
    final field is always emitted. Each value is trimmed and loses any
    remaining outer quotes.
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append(_clean_cell("".join(current)))
            current = []
        else:
            current.append(ch)
    values.append(_clean_cell("".join(current)))
    return values


def _clean_cell(text: str) -> str:
    text = text.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


def parse_records(lines: Sequence[str], header_index: int) -> ParsedCsv:
    """Turn the header line and every following line into raw records.

    Ragged rows are padded with "" or truncated to the header width and
    reported as ROW_WIDTH warnings; no row is ever rejected here.

    Raises:
        TooFewLinesError: fewer than 2 lines in total
    """
    if len(lines) < 2:
        raise TooFewLinesError("CSV must have at least 2 lines (header and data)")

    headers = [canonicalize_header(c) for c in lines[header_index].split(",")]
    width = len(headers)
    records: list[dict[str, str]] = []
    warnings: list[ImportWarning] = []

    for offset, line in enumerate(lines[header_index + 1:]):
        values = split_delimited_line(line)
        if len(values) != width:
            row_number = header_index + offset + 2
            warnings.append(
                ImportWarning(
                    row_index=row_number,
                    message=f"Row {row_number} has {len(values)} values but {width} headers expected",
                    kind=WarningKind.ROW_WIDTH,
                )
            )
            values = (values + [""] * width)[:width]
        records.append(dict(zip(headers, values)))

    return ParsedCsv(headers=headers, records=records, warnings=warnings)
