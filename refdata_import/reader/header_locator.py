from __future__ import annotations

from collections.abc import Sequence

"""Header row detection for noisy spreadsheet exports.

Exports often carry title lines, report dates or blank banner rows above the
real column header. The header is the first of the leading lines that
mentions enough of the target entity's known header fragments.
"""

__all__ = [
    "HEADER_SCAN_LIMIT",
    "HEADER_MATCH_THRESHOLD",
    "locate_header_row",
]

HEADER_SCAN_LIMIT = 10
HEADER_MATCH_THRESHOLD = 2


def locate_header_row(
    lines: Sequence[str],
    keywords: Sequence[str],
    *,
    scan_limit: int = HEADER_SCAN_LIMIT,
    threshold: int = HEADER_MATCH_THRESHOLD,
) -> int:
    """Return the index of the most likely header line.

    Parameters
    ----------
    lines: trimmed, non-blank input lines
    keywords: lower-case header fragments for the target entity
    scan_limit: number of leading lines inspected
    threshold: minimum number of fragments a header line must contain

    Falls back to the second line (or the only line) when no candidate reaches
    the threshold. Never raises.
    """
    for i, line in enumerate(lines[:scan_limit]):
        lowered = line.lower()
        hits = sum(1 for k in keywords if k in lowered)
        if hits >= threshold:
            return i
    return max(0, min(1, len(lines) - 1))
