from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Result and warning models for a single CSV import.

ImportWarning is the row-scoped, non-fatal diagnostic produced by the parser
and the schema mapper. ImportResult is what the caller (HTTP layer or CLI)
receives on success. ImportFailure is the base class of every structural
error that aborts an import before the collection is touched.
"""

__all__ = [
    "ImportFailure",
    "ImportResult",
    "ImportWarning",
    "WarningKind",
]


class ImportFailure(Exception):
    """Structural failure: the import is aborted and the store is untouched.

    Subclasses set ``code`` to one of NO_DATA / TOO_FEW_LINES / UNSUPPORTED_ENTITY.
    """
    code = "IMPORT_FAILURE"


class WarningKind(Enum):
    ROW_WIDTH = "ROW_WIDTH"          # ragged row padded or truncated
    ROW_SKIPPED = "ROW_SKIPPED"      # missing key / duplicate key
    ROW_DEFAULTED = "ROW_DEFAULTED"  # row kept, defaults or normalizer notes


@dataclass(frozen=True)
class ImportWarning:
    """Non-fatal diagnostic.

    Attributes:
        row_index: 1-based row position the message refers to
        message: Fully rendered operator-facing text
        kind: Warning classification
    """
    row_index: int
    message: str
    kind: WarningKind = WarningKind.ROW_DEFAULTED

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ImportResult:
    entity: str
    imported_count: int
    skipped_count: int
    total_count: int
    warnings: list[ImportWarning] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Wire shape relayed back by the HTTP layer."""
        return {
            "importedCount": self.imported_count,
            "skippedCount": self.skipped_count,
            "totalCount": self.total_count,
            "warnings": [str(w) for w in self.warnings],
            "message": self.message,
        }
