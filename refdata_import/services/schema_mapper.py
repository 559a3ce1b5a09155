from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..models.entities import TargetEntity
from ..models.import_result import ImportWarning, WarningKind
from ..normalize.fields import (
    Normalized,
    normalize_date,
    normalize_enum_value,
    normalize_number,
    normalize_string,
)
from .entity_schemas import TODAY, EntityDescriptor, FieldSpec, descriptor_for

"""Schema mapping: raw string records -> typed, defaulted entity records.

Per row, in order:
1. read and normalize the dedup key; missing -> skip (warned)
2. read the remaining critical fields; missing -> skip (warned)
3. duplicate key within this batch -> skip (warned), first occurrence kept
4. read every other field through its alias chain and normalizer
5. substitute defaults for empty fields, one warning per substitution

All warnings of one row are joined into a single "Record N: ..." message.
"""

__all__ = [
    "MappingResult",
    "map_records",
    "read_field",
]

logger = logging.getLogger(__name__)


@dataclass
class MappingResult:
    mapped_records: list[Any]
    warnings: list[ImportWarning] = field(default_factory=list)


def read_field(record: Mapping[str, str], spec: FieldSpec) -> Normalized:
    """Read one logical field: first alias with a non-empty value, normalized."""
    raw = ""
    for alias in spec.aliases:
        candidate = normalize_string(record.get(alias)).value
        if candidate:
            raw = candidate
            break

    if spec.kind == "number":
        return normalize_number(raw)
    if spec.kind == "date":
        return normalize_date(raw)
    if spec.kind == "enum":
        return normalize_enum_value(raw, spec.enum_type or "")
    return normalize_string(raw)


def _row_warning(index: int, notes: list[str], kind: WarningKind) -> ImportWarning:
    return ImportWarning(row_index=index, message=f"Record {index}: {', '.join(notes)}", kind=kind)


def map_records(
    records: Sequence[Mapping[str, str]],
    entity: TargetEntity | str,
    *,
    today: date | None = None,
) -> MappingResult:
    """Map raw records onto the entity's record model.

    Args:
        records: raw records from the parser, in file order
        entity: target entity (name or enum)
        today: date used for TODAY defaults (defaults to ``date.today()``)

    Returns:
        MappingResult with records in input order minus skipped rows, and
        warnings in the order they were produced
    """
    descriptor: EntityDescriptor = descriptor_for(entity)
    today_iso = (today or date.today()).isoformat()
    mapped: list[Any] = []
    warnings: list[ImportWarning] = []
    seen_keys: set[str] = set()

    for index, record in enumerate(records, start=1):
        key_spec = descriptor.key
        key = read_field(record, key_spec).value
        if not key:
            warnings.append(_row_warning(index, [f"Missing {key_spec.label} - SKIPPING"], WarningKind.ROW_SKIPPED))
            continue

        missing = [
            descriptor.field(name).label
            for name in descriptor.critical_fields
            if not read_field(record, descriptor.field(name)).value
        ]
        if missing:
            warnings.append(
                _row_warning(index, [f"Missing {' and '.join(missing)} - SKIPPING"], WarningKind.ROW_SKIPPED)
            )
            continue

        if key in seen_keys:
            warnings.append(
                _row_warning(index, [f'Duplicate {key_spec.label} "{key}" - SKIPPING'], WarningKind.ROW_SKIPPED)
            )
            continue
        seen_keys.add(key)

        values: dict[str, Any] = {}
        notes: list[str] = []
        for spec in descriptor.fields:
            result = read_field(record, spec)
            notes.extend(result.warnings)
            value = result.value
            if value == "" and spec.default is not None:
                value = today_iso if spec.default is TODAY else spec.default
                notes.append(f"Missing {spec.label}, using {spec.describe_default()}")
            values[spec.name] = value

        if notes:
            warnings.append(_row_warning(index, notes, WarningKind.ROW_DEFAULTED))
        mapped.append(descriptor.model(**values))

    logger.debug(
        "entity=%s mapped=%d skipped=%d warnings=%d",
        descriptor.entity.value,
        len(mapped),
        len(records) - len(mapped),
        len(warnings),
    )
    return MappingResult(mapped_records=mapped, warnings=warnings)
