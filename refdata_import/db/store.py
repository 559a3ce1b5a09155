from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Protocol

from ..models.entities import TargetEntity
from ..services.entity_schemas import DESCRIPTORS, EntityDescriptor
from .batch_insert import BatchMetrics, batch_insert

"""Collection stores: the persistence side of a whole-collection replace.

The orchestrator only needs find_all / delete_all / bulk_insert plus a
transaction boundary around the delete-then-insert pair. ensure_collections
is the bootstrap step callers run once before importing (tables, unique key
indexes); the import itself never creates anything.
"""

__all__ = [
    "CollectionStore",
    "InMemoryStore",
    "PostgresStore",
    "StoreError",
]

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class StoreError(Exception):
    pass


class CollectionStore(Protocol):
    def ensure_collections(self) -> None: ...

    def find_all(self, entity: TargetEntity) -> list[dict[str, Any]]: ...

    def delete_all(self, entity: TargetEntity) -> int: ...

    def bulk_insert(self, entity: TargetEntity, documents: Sequence[Mapping[str, Any]]) -> int: ...

    def transaction(self) -> Any: ...


class InMemoryStore:
    """Dict-of-lists store used in mock mode and tests."""

    def __init__(self, initial: Mapping[TargetEntity, Sequence[Mapping[str, Any]]] | None = None) -> None:
        self._collections: dict[TargetEntity, list[dict[str, Any]]] = {e: [] for e in TargetEntity}
        for entity, docs in (initial or {}).items():
            self._collections[entity] = [dict(d) for d in docs]

    def ensure_collections(self) -> None:
        for entity in TargetEntity:
            self._collections.setdefault(entity, [])

    def find_all(self, entity: TargetEntity) -> list[dict[str, Any]]:
        return [dict(d) for d in self._collections[entity]]

    def delete_all(self, entity: TargetEntity) -> int:
        removed = len(self._collections[entity])
        self._collections[entity] = []
        return removed

    def bulk_insert(self, entity: TargetEntity, documents: Sequence[Mapping[str, Any]]) -> int:
        key = DESCRIPTORS[entity].key_field
        existing = {d[key] for d in self._collections[entity]}
        batch = [dict(d) for d in documents]
        for doc in batch:
            if doc[key] in existing:
                raise StoreError(f"duplicate key {key}={doc[key]!r} in {entity.value}")
            existing.add(doc[key])
        self._collections[entity].extend(batch)
        return len(batch)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = copy.deepcopy(self._collections)
        try:
            yield
        except Exception:
            self._collections = snapshot
            raise


class PostgresStore:
    """Store backed by one PostgreSQL table per entity.

    Column names are the record model's field names. The cursor's connection
    is expected in autocommit mode; transaction() issues BEGIN/COMMIT/ROLLBACK.
    """

    def __init__(
        self,
        cursor: Any,
        tables: Mapping[TargetEntity, str] | None = None,
        page_size: int = 1000,
    ) -> None:
        self.cursor = cursor
        self.page_size = page_size
        self.tables: dict[TargetEntity, str] = {e: d.collection for e, d in DESCRIPTORS.items()}
        self.tables.update(tables or {})
        for table in self.tables.values():
            if not _IDENTIFIER.match(table):
                raise StoreError(f"invalid table name: {table!r}")

    def _table(self, entity: TargetEntity) -> str:
        return self.tables[entity]

    def ensure_collections(self) -> None:
        for entity, descriptor in DESCRIPTORS.items():
            self.cursor.execute(_create_table_sql(self._table(entity), descriptor))
        logger.debug("ensured tables %s", sorted(self.tables.values()))

    def find_all(self, entity: TargetEntity) -> list[dict[str, Any]]:
        columns = [f.name for f in DESCRIPTORS[entity].fields]
        cols_sql = ",".join(f'"{c}"' for c in columns)
        self.cursor.execute(f'SELECT {cols_sql} FROM "{self._table(entity)}" ORDER BY "id"')
        return [dict(zip(columns, row)) for row in self.cursor.fetchall()]

    def delete_all(self, entity: TargetEntity) -> int:
        self.cursor.execute(f'DELETE FROM "{self._table(entity)}"')
        return self.cursor.rowcount if self.cursor.rowcount is not None else 0

    def bulk_insert(self, entity: TargetEntity, documents: Sequence[Mapping[str, Any]]) -> int:
        columns = [f.name for f in DESCRIPTORS[entity].fields]
        rows = [[doc.get(c) for c in columns] for doc in documents]

        def _log_batch(metrics: BatchMetrics) -> None:
            logger.debug(
                "table=%s inserted=%d elapsed=%.3fs",
                self._table(entity),
                metrics.batch_size,
                metrics.elapsed_seconds,
            )

        result = batch_insert(
            self.cursor,
            self._table(entity),
            columns,
            rows,
            page_size=self.page_size,
            metrics_callback=_log_batch,
        )
        return result.inserted_rows

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self.cursor.execute("BEGIN")
        try:
            yield
        except Exception:
            self.cursor.execute("ROLLBACK")
            raise
        self.cursor.execute("COMMIT")


def _create_table_sql(table: str, descriptor: EntityDescriptor) -> str:
    cols = ['"id" BIGSERIAL PRIMARY KEY']
    for spec in descriptor.fields:
        sql_type = "INTEGER" if spec.kind == "number" else "TEXT"
        constraint = " UNIQUE" if spec.name == descriptor.key_field else ""
        cols.append(f'"{spec.name}" {sql_type} NOT NULL{constraint}')
    cols.append('"created_at" TIMESTAMPTZ NOT NULL DEFAULT now()')
    return f'CREATE TABLE IF NOT EXISTS "{table}" ({", ".join(cols)})'
