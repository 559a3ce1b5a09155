from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""Operator-facing summary text.

render_import_message builds the per-import message returned with an
ImportResult; render_summary_line builds the single SUMMARY line printed at
the end of a CLI run.
"""


def render_import_message(entity: str, imported: int, skipped: int) -> str:
    """Describe one import outcome.

    >>> render_import_message("Product", 3, 0)
    'Successfully imported 3 records to Product'
    >>> render_import_message("Product", 3, 2)
    'Successfully imported 3 records to Product (2 records skipped due to missing critical fields or duplicates)'
    """
    if imported == 0:
        return f"No valid records found to import to {entity}"
    message = f"Successfully imported {imported} records to {entity}"
    if skipped:
        message += f" ({skipped} records skipped due to missing critical fields or duplicates)"
    return message


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed}
    imported={rows} skipped={rows} warnings={n} elapsed_sec={elapsed}
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"imported={result.total_imported_rows} "
        f"skipped={result.total_skipped_rows} "
        f"warnings={result.total_warnings} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
