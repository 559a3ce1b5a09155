from __future__ import annotations

import logging
import re
from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Any, NamedTuple

"""Field normalizers used by the schema mapper.

Every function is total: it never raises and always returns a best-effort
``Normalized`` value. Problems the caller must see travel in
``Normalized.warnings``; problems that are only worth a log line (an
unrecognized date format) go to the logger.
"""

__all__ = [
    "ENUM_SYNONYMS",
    "Normalized",
    "normalize_date",
    "normalize_enum_value",
    "normalize_number",
    "normalize_string",
    "title_case_words",
]

logger = logging.getLogger(__name__)


class Normalized(NamedTuple):
    value: Any
    warnings: tuple[str, ...] = ()


ENUM_SYNONYMS: dict[str, dict[str, str]] = {
    "status": {
        "active": "Active",
        "pending": "Pending",
        "inactive": "Inactive",
        "completed": "Completed",
        "in progress": "In Progress",
        "factory disassembly": "Factory Disassembly",
    },
    "assemblyType": {
        "main assembly": "Main Assembly",
        "sub assembly": "Sub Assembly",
        "main": "Main Assembly",
        "sub": "Sub Assembly",
    },
    "auto": {
        "yes": "Yes",
        "no": "No",
        "y": "Yes",
        "n": "No",
        "true": "Yes",
        "false": "No",
        "1": "Yes",
        "0": "No",
    },
}

_NUMBER_JUNK = re.compile(r"[^\d.\-]", re.ASCII)
# Leading float literal, same prefix rule as JavaScript parseFloat
_NUMBER_PREFIX = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_PURE_NUMERIC = re.compile(r"^\d+(\.\d+)?$", re.ASCII)

_DAY_FIRST = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$", re.ASCII)
_YEAR_FIRST = re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})$", re.ASCII)
_DAY_FIRST_SHORT_YEAR = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2})$", re.ASCII)


def title_case_words(text: str) -> str:
    """Capitalize the first letter of each whitespace-separated word, lower the rest."""
    return " ".join(w[:1].upper() + w[1:].lower() for w in text.split())


def normalize_string(value: Any) -> Normalized:
    if value is None:
        return Normalized("")
    return Normalized(str(value).strip())


def normalize_number(value: Any, default: int = 0) -> Normalized:
    """Coerce to an integer; empty or unparseable input yields ``default``.

    Everything except digits, '.' and '-' is dropped first, so "1,234 units"
    reads as 1234. The result is rounded half-up.
    """
    text = normalize_string(value).value
    if text == "":
        return Normalized(default)
    match = _NUMBER_PREFIX.match(_NUMBER_JUNK.sub("", text))
    if match is None:
        return Normalized(default)
    # exact half-up rounding; a float overflows on very long digit runs
    number = Decimal(match.group(0))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(number.as_tuple().digits) + 2)
        rounded = (number + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
    return Normalized(int(rounded))


def normalize_date(value: Any) -> Normalized:
    """Canonicalize a day-first or ISO-ordered date to YYYY-MM-DD.

    Patterns, first match wins: D/M/YYYY, YYYY/M/D, D/M/YY (year prefixed
    with "20"); '-' and '/' are interchangeable. A purely numeric value
    (spreadsheet serial date) yields "" and a warning. Anything else is
    returned unchanged.
    """
    text = normalize_string(value).value
    if not text:
        return Normalized("")

    if _PURE_NUMERIC.match(text):
        return Normalized("", (f'Numeric value passed to date parser, skipping: "{text}"',))

    m = _DAY_FIRST.match(text)
    if m:
        day, month, year = m.groups()
        return Normalized(f"{year}-{month.zfill(2)}-{day.zfill(2)}")
    m = _YEAR_FIRST.match(text)
    if m:
        year, month, day = m.groups()
        return Normalized(f"{year}-{month.zfill(2)}-{day.zfill(2)}")
    m = _DAY_FIRST_SHORT_YEAR.match(text)
    if m:
        day, month, year = m.groups()
        return Normalized(f"20{year}-{month.zfill(2)}-{day.zfill(2)}")

    logger.warning('Date format not recognized, using as-is: "%s"', text)
    return Normalized(text)


def normalize_enum_value(value: Any, enum_type: str) -> Normalized:
    """Map a free-text enum value onto its canonical spelling.

    Lookup is case-insensitive against ``ENUM_SYNONYMS[enum_type]``; on a miss
    each word is title-cased instead.
    """
    text = normalize_string(value).value
    if not text:
        return Normalized("")
    mapping = ENUM_SYNONYMS.get(enum_type, {})
    canonical = mapping.get(text.lower())
    if canonical is not None:
        return Normalized(canonical)
    return Normalized(title_case_words(text))
