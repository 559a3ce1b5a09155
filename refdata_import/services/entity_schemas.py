from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models.entities import AssemblyRecord, ProductRecord, TargetEntity, TestDocumentRecord

"""Declarative per-entity import descriptors.

Each descriptor lists, for one target entity: the record model, the dedup
key, the fields that must be present for a row to be kept at all, and for
every field its alias-fallback chain, normalizer and default. The schema
mapper is a single generic function driven by these tables.
"""

__all__ = [
    "DESCRIPTORS",
    "EntityDescriptor",
    "FieldSpec",
    "TODAY",
    "descriptor_for",
    "find_header_keywords",
]

# Sentinel default: substitute the import date
TODAY = object()


@dataclass(frozen=True)
class FieldSpec:
    """How one logical field is read from a raw record.

    Attributes:
        name: attribute on the record model
        label: lower-case wording used in warnings ("assembly date")
        aliases: canonical headers tried in order; the first non-empty wins
        kind: normalizer to apply (string | number | date | enum)
        enum_type: synonym table name for kind="enum"
        default: value substituted when the field is empty (None = no default)
        default_label: how the default is named in the warning
    """
    name: str
    label: str
    aliases: tuple[str, ...]
    kind: str = "string"
    enum_type: str | None = None
    default: Any = None
    default_label: str | None = None

    @property
    def export_header(self) -> str:
        return self.aliases[0]

    def describe_default(self) -> str:
        return self.default_label if self.default_label is not None else str(self.default)


@dataclass(frozen=True)
class EntityDescriptor:
    entity: TargetEntity
    collection: str  # default table / collection name
    model: type
    key_field: str
    fields: tuple[FieldSpec, ...]
    critical_fields: tuple[str, ...] = ()  # besides the key, no default -> skip row
    header_keywords: tuple[str, ...] = ()

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    @property
    def key(self) -> FieldSpec:
        return self.field(self.key_field)


_PRODUCT_CODE_ALIASES = ("Product Code", "Prod Code")

ASSEMBLY = EntityDescriptor(
    entity=TargetEntity.ASSEMBLY,
    collection="ul_asm",
    model=AssemblyRecord,
    key_field="assembly_number",
    fields=(
        FieldSpec("assembly_number", "assembly number", ("Assembly Number", "Assembly No", "Asm Number")),
        FieldSpec("assembly_date", "assembly date", ("Assembly Date", "Date"),
                  kind="date", default=TODAY, default_label="current date"),
        FieldSpec("assemble_by", "assembler name", ("Assemble By", "Assembled By", "Assembler"),
                  default="Unknown"),
        FieldSpec("status", "status", ("Status",), kind="enum", enum_type="status", default="Active"),
        FieldSpec("product_code", "product code", _PRODUCT_CODE_ALIASES, default="UNKNOWN"),
        FieldSpec("product_description", "product description",
                  ("Product Description", "Prod Desc", "Description"), default="Unknown Product"),
        FieldSpec("source_warehouse", "source warehouse", ("Source Warehouse", "Source"), default="WH001"),
        FieldSpec("destination_warehouse", "destination warehouse",
                  ("Destination Warehouse", "Destination"), default="WH001"),
        FieldSpec("assembly_type", "assembly type", ("Assembly Type", "Type"),
                  kind="enum", enum_type="assemblyType", default="Main Assembly"),
        FieldSpec("auto", "auto field", ("Auto", "Automatic"), kind="enum", enum_type="auto", default="No"),
        FieldSpec("assembled_quantity", "assembled quantity",
                  ("Assembled Quantity", "Quantity", "Qty"), kind="number"),
    ),
    header_keywords=(
        "assembly number", "assembly no", "asm number", "asm no",
        "product code", "prod code", "assembly date",
    ),
)

PRODUCT = EntityDescriptor(
    entity=TargetEntity.PRODUCT,
    collection="ul_product",
    model=ProductRecord,
    key_field="product_code",
    fields=(
        FieldSpec("product_code", "product code", _PRODUCT_CODE_ALIASES),
        FieldSpec("product_description", "product description", ("Product Description", "Description"),
                  default="Unknown Product"),
        FieldSpec("product_group", "product group", ("Product Group", "Group"), default="General"),
        FieldSpec("bin_location", "bin location", ("Bin Location", "Location"), default="A1-B1"),
        FieldSpec("base_pack", "base pack", ("Base Pack", "Pack Size"), kind="number"),
        FieldSpec("allocated", "allocated", ("Allocated",), kind="number"),
        FieldSpec("on_hand", "on hand", ("On Hand", "Stock"), kind="number"),
        FieldSpec("base_unit", "base unit", ("Base Unit", "Unit"), default="PCS"),
    ),
    header_keywords=(
        "product code", "prod code", "product description", "prod desc", "product group",
    ),
)

TEST_DOCUMENT = EntityDescriptor(
    entity=TargetEntity.TEST_DOCUMENT,
    collection="test_document_list",
    model=TestDocumentRecord,
    key_field="document_number",
    fields=(
        FieldSpec("product_code", "product code", _PRODUCT_CODE_ALIASES),
        FieldSpec("document_description", "document description", ("Document Description", "Description"),
                  default="Test Document"),
        FieldSpec("document_number", "document number", ("Document Number", "Doc Number")),
        FieldSpec("version", "version", ("Version", "Ver"), default="1.0"),
        FieldSpec("type", "type", ("Type",), default="General"),
    ),
    critical_fields=("product_code",),
    header_keywords=(
        "product code", "prod code", "document description", "document number", "doc number",
    ),
)

DESCRIPTORS: dict[TargetEntity, EntityDescriptor] = {
    d.entity: d for d in (ASSEMBLY, PRODUCT, TEST_DOCUMENT)
}


def descriptor_for(entity: TargetEntity | str) -> EntityDescriptor:
    return DESCRIPTORS[TargetEntity.parse(entity)]


def find_header_keywords(entity: TargetEntity | str) -> list[str]:
    return list(descriptor_for(entity).header_keywords)
