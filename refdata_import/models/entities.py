from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from .import_result import ImportFailure

"""Target entities and their typed record models.

A mapped record is fully normalized and defaulted; it only exists between the
schema mapper and the store's bulk insert.
"""

__all__ = [
    "AssemblyRecord",
    "ProductRecord",
    "TargetEntity",
    "TestDocumentRecord",
    "UnsupportedEntityError",
]


class UnsupportedEntityError(ImportFailure):
    code = "UNSUPPORTED_ENTITY"


class TargetEntity(Enum):
    """The three reference tables the pipeline can populate."""
    ASSEMBLY = "Assembly"
    PRODUCT = "Product"
    TEST_DOCUMENT = "TestDocument"

    @classmethod
    def parse(cls, name: str | TargetEntity) -> TargetEntity:
        """Resolve an entity name, accepting the legacy collection names too.

        Raises:
            UnsupportedEntityError: name is not one of the known entities
        """
        if isinstance(name, TargetEntity):
            return name
        key = (name or "").strip()
        for member in cls:
            if key == member.value:
                return member
        legacy = _LEGACY_COLLECTION_NAMES.get(key)
        if legacy is not None:
            return legacy
        raise UnsupportedEntityError(f"Database {name} is not supported for CSV import")


# Legacy document-store collection names
_LEGACY_COLLECTION_NAMES = {
    "UL_ASM": TargetEntity.ASSEMBLY,
    "UL_Product": TargetEntity.PRODUCT,
    "Test_Document_List": TargetEntity.TEST_DOCUMENT,
}


@dataclass(frozen=True)
class AssemblyRecord:
    assembly_number: str
    assembly_date: str  # YYYY-MM-DD when recognizable, else source text
    assemble_by: str
    status: str
    product_code: str
    product_description: str
    source_warehouse: str
    destination_warehouse: str
    assembly_type: str
    auto: str
    assembled_quantity: int

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProductRecord:
    product_code: str
    product_description: str
    product_group: str
    bin_location: str
    base_pack: int
    allocated: int
    on_hand: int
    base_unit: str

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TestDocumentRecord:
    __test__ = False  # not a pytest class

    product_code: str
    document_description: str
    document_number: str
    version: str
    type: str

    def to_document(self) -> dict[str, Any]:
        return asdict(self)
