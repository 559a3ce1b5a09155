"""Domain models for the reference-data CSV importer."""

from .config_models import DatabaseConfig, ImportConfig, SourceConfig
from .entities import AssemblyRecord, ProductRecord, TargetEntity, TestDocumentRecord
from .import_result import ImportFailure, ImportResult, ImportWarning, WarningKind

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "SourceConfig",
    # Entities
    "AssemblyRecord",
    "ProductRecord",
    "TargetEntity",
    "TestDocumentRecord",
    # Results
    "ImportFailure",
    "ImportResult",
    "ImportWarning",
    "WarningKind",
]
