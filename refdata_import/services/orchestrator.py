from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import psycopg2

from ..db.batch_insert import BatchInsertError
from ..db.store import CollectionStore, StoreError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig, SourceConfig
from ..models.entities import TargetEntity
from ..models.error_record import ErrorRecord
from ..models.import_result import ImportFailure, ImportResult, ImportWarning
from ..models.processing_result import FileStat, ProcessingResult
from ..reader.header_locator import locate_header_row
from ..reader.record_parser import parse_records, split_lines
from .entity_schemas import find_header_keywords
from .progress import ProgressTracker
from .schema_mapper import map_records
from .summary import render_import_message

"""Import orchestration.

import_csv runs one CSV text through header location, parsing and mapping,
then replaces the target collection wholesale. process_all runs every source
listed in the configuration, isolating failures per file.

The delete-then-insert pair runs inside store.transaction(). Concurrent
imports of the same entity are not serialized.
"""

__all__ = [
    "NoDataError",
    "ProcessingError",
    "import_csv",
    "process_all",
]

logger = logging.getLogger(__name__)


class NoDataError(ImportFailure):
    code = "NO_DATA"


class ProcessingError(Exception):
    """Fatal error preventing a multi-file run from starting."""
    pass


def import_csv(
    target_entity: TargetEntity | str,
    csv_text: str | bytes | None,
    store: CollectionStore,
    *,
    today: date | None = None,
) -> ImportResult:
    """Replace the target entity's collection with the rows of ``csv_text``.

    Args:
        target_entity: "Assembly", "Product", "TestDocument" (or legacy name)
        csv_text: full file content
        store: CollectionStore implementation
        today: date used for defaulted assembly dates

    Returns:
        ImportResult with counts, warnings and a summary message

    Raises:
        UnsupportedEntityError: unknown target entity
        NoDataError: empty input
        TooFewLinesError: fewer than 2 non-blank lines
    """
    entity = TargetEntity.parse(target_entity)
    if not csv_text:
        raise NoDataError("No CSV data provided")

    lines = split_lines(csv_text)
    header_index = locate_header_row(lines, find_header_keywords(entity))
    parsed = parse_records(lines, header_index)
    logger.debug(
        "entity=%s header_row=%d headers=%s records=%d",
        entity.value,
        header_index,
        parsed.headers,
        len(parsed.records),
    )

    mapping = map_records(parsed.records, entity, today=today)
    warnings: list[ImportWarning] = [*parsed.warnings, *mapping.warnings]
    documents = [r.to_document() for r in mapping.mapped_records]

    with store.transaction():
        removed = store.delete_all(entity)
        logger.debug("entity=%s cleared %d existing records", entity.value, removed)
        if documents:
            store.bulk_insert(entity, documents)

    total = len(parsed.records)
    imported = len(documents)
    skipped = total - imported
    message = render_import_message(entity.value, imported, skipped)
    logger.info("%s", message)
    return ImportResult(
        entity=entity.value,
        imported_count=imported,
        skipped_count=skipped,
        total_count=total,
        warnings=warnings,
        message=message,
    )


def _today_in(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


def _failed(
    source: SourceConfig,
    start: datetime,
    error_log: ErrorLogBuffer,
    error_type: str,
    error: Exception,
) -> FileStat:
    logger.error("file=%s entity=%s %s: %s", source.name, source.entity.value, error_type, error)
    error_log.append(ErrorRecord.create(source.name, source.entity.value, -1, error_type, str(error)))
    return FileStat(
        file_name=source.name,
        entity=source.entity.value,
        status="failed",
        imported_rows=0,
        skipped_rows=0,
        warnings=0,
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        error=str(error),
    )


def _import_source(
    source: SourceConfig,
    store: CollectionStore,
    error_log: ErrorLogBuffer,
    today: date,
) -> FileStat:
    """Import one configured source; failures are recorded, not raised."""
    start = datetime.now(UTC)
    try:
        text = source.file.read_bytes()
        result = import_csv(source.entity, text, store, today=today)
    except ImportFailure as e:
        return _failed(source, start, error_log, e.code, e)
    except OSError as e:
        return _failed(source, start, error_log, "READ_ERROR", e)
    except (StoreError, BatchInsertError, psycopg2.Error) as e:
        # the transaction has already rolled back
        return _failed(source, start, error_log, "STORE_ERROR", e)
    except Exception as e:
        return _failed(source, start, error_log, "IMPORT_ERROR", e)

    for w in result.warnings:
        logger.debug("file=%s %s", source.name, w)
        error_log.append(ErrorRecord.create(source.name, result.entity, w.row_index, w.kind.value, w.message))

    return FileStat(
        file_name=source.name,
        entity=result.entity,
        status="success",
        imported_rows=result.imported_count,
        skipped_rows=result.skipped_count,
        warnings=len(result.warnings),
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
    )


def process_all(config: ImportConfig, store: CollectionStore) -> ProcessingResult:
    """Import every configured source in order.

    Args:
        config: Import configuration
        store: CollectionStore implementation

    Returns:
        ProcessingResult with per-file stats

    Raises:
        ProcessingError: the configured timezone is unknown
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)
    try:
        today = _today_in(config.timezone)
    except (KeyError, ValueError) as e:
        raise ProcessingError(f"Invalid timezone {config.timezone!r}: {e}") from e

    file_stats: list[FileStat] = []
    with ProgressTracker(len(config.sources), description="Importing files") as progress:
        for source in config.sources:
            progress.start_file(Path(source.file))
            stat = _import_source(source, store, error_log, today)
            file_stats.append(stat)
            progress.set_postfix(
                success=sum(1 for s in file_stats if s.status == "success"),
                failed=sum(1 for s in file_stats if s.status == "failed"),
            )
            progress.finish_file(success=stat.status == "success")

    try:
        error_log.flush()
    except OSError as e:
        logger.warning("could not write error log: %s", e)

    end_time = datetime.now(UTC)
    ok = [s for s in file_stats if s.status == "success"]
    return ProcessingResult(
        success_files=len(ok),
        failed_files=len(file_stats) - len(ok),
        total_imported_rows=sum(s.imported_rows for s in ok),
        total_skipped_rows=sum(s.skipped_rows for s in ok),
        total_warnings=sum(s.warnings for s in ok),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
