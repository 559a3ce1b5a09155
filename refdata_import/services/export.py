from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from ..models.entities import TargetEntity
from .entity_schemas import descriptor_for

"""CSV export of a collection.

Columns use the canonical header names the import side recognizes, in
descriptor order, so an exported file imports back unchanged.
"""

__all__ = [
    "export_columns",
    "export_csv",
]


def export_columns(entity: TargetEntity | str) -> list[str]:
    return [spec.export_header for spec in descriptor_for(entity).fields]


def export_csv(entity: TargetEntity | str, documents: Sequence[Mapping[str, Any]]) -> str:
    """Serialize stored documents (one per line) with a header row."""
    descriptor = descriptor_for(entity)
    names = [spec.name for spec in descriptor.fields]
    frame = pd.DataFrame([[doc.get(n) for n in names] for doc in documents], columns=names, dtype=object)
    frame.columns = export_columns(entity)
    return frame.to_csv(index=False, lineterminator="\n")
