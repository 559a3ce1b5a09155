from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import pandas as pd
import psycopg2
from dotenv import load_dotenv

from refdata_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from refdata_import.db.store import InMemoryStore, PostgresStore
from refdata_import.logging.init import get_logger, log_summary, setup_logging
from refdata_import.models.config_models import ImportConfig
from refdata_import.models.entities import TargetEntity
from refdata_import.models.import_result import ImportFailure
from refdata_import.reader.header_locator import locate_header_row
from refdata_import.reader.record_parser import parse_records, split_lines
from refdata_import.services.entity_schemas import find_header_keywords
from refdata_import.services.export import export_csv
from refdata_import.services.orchestrator import ProcessingError, process_all
from refdata_import.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (overrides the environment) and the YAML config
- Open a PostgreSQL connection, or fall back to the in-memory store
- Import every configured source (or inspect / export) and print SUMMARY
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string, by priority: DATABASE_URL / PGDSN, PG* variables, config."""
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def _connect(cfg: ImportConfig):  # pragma: no cover (needs a live server)
    conn = psycopg2.connect(_resolve_dsn(cfg))
    # the store issues BEGIN/COMMIT itself
    conn.autocommit = True
    return conn


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Reference-data CSV importer")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to the YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print located headers & first rows then exit")
    p.add_argument("--export", metavar="ENTITY", help="Export a collection as CSV instead of importing")
    p.add_argument("--output", help="Export destination (default: stdout)")
    return p.parse_args(argv)


def _inspect_data(cfg: ImportConfig) -> int:
    for source in cfg.sources:
        print(f"FILE: {source.name} entity={source.entity.value}")
        try:
            lines = split_lines(source.file.read_bytes())
            header_index = locate_header_row(lines, find_header_keywords(source.entity))
            parsed = parse_records(lines, header_index)
        except (OSError, ImportFailure) as e:
            print(f"  read_error: {e}")
            continue
        print(f"  header_row={header_index} cols={parsed.headers} rows={len(parsed.records)}")
        sample = pd.DataFrame(parsed.records[:3], columns=parsed.headers)
        for line in sample.to_string(index=False).splitlines():
            print(f"    {line}")
    return EXIT_SUCCESS_ALL


def _run(args: argparse.Namespace, cfg: ImportConfig, store, db_mode: str) -> int:
    logger = get_logger()
    if args.export:
        try:
            entity = TargetEntity.parse(args.export)
        except ImportFailure as e:
            logger.error(f"export: {e}")
            return EXIT_FATAL
        text = export_csv(entity, store.find_all(entity))
        if args.output:
            Path(args.output).write_text(text, encoding="utf-8")
            logger.info(f"exported {entity.value} to {args.output}")
        else:
            sys.stdout.write(text)
        return EXIT_SUCCESS_ALL

    store.ensure_collections()
    try:
        result = process_all(cfg, store)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    logger.info(f"mode={db_mode} imported_rows={result.total_imported_rows}")
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when no list was given (an empty list means "no args")
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    logger.info(f"Sources: {len(cfg.sources)} file(s)")

    if args.inspect_data:
        return _inspect_data(cfg)

    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        return _run(args, cfg, InMemoryStore(), "mock")

    try:
        conn = _connect(cfg)
    except Exception as db_e:
        if args.export:
            logger.error(f"export: database unavailable: {db_e}")
            return EXIT_FATAL
        logger.info(f"DB connection failed -> fallback to mock mode: {db_e}")
        return _run(args, cfg, InMemoryStore(), "mock")

    try:
        with conn.cursor() as cur:
            return _run(args, cfg, PostgresStore(cur, tables=cfg.tables), "live")
    finally:
        conn.close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
