from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .entities import TargetEntity

"""Config dataclasses for the reference-data CSV importer.

Built by ``refdata_import.config.loader.load_config`` after schema
validation; nothing here touches the filesystem.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class SourceConfig:
    """One CSV file to load into one target entity."""
    entity: TargetEntity
    file: Path

    @property
    def name(self) -> str:
        return self.file.name


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    sources: list[SourceConfig]  # processed in file order
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    tables: dict[TargetEntity, str] = field(default_factory=dict)  # table name overrides
    timezone: str = "UTC"  # "today" for defaulted dates
    error_log_dir: Path = Path("./logs")
