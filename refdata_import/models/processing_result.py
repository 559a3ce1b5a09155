from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for a multi-file import run.

One FileStat per configured source, aggregated into a ProcessingResult that
feeds the SUMMARY line and the CLI exit code.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    entity: str
    status: str  # success/failed
    imported_rows: int
    skipped_rows: int
    warnings: int
    elapsed_seconds: float
    error: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for the SUMMARY output."""
    success_files: int
    failed_files: int
    total_imported_rows: int
    total_skipped_rows: int
    total_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
