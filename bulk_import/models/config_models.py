from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the bulk import tool.

Built by ``bulk_import.config.loader.load_config`` after the YAML file has
passed JSON schema validation. Every section is optional in the file; the
defaults below describe the stock dashboard database.
"""

__all__ = [
    "DatabaseConfig",
    "CollectionConfig",
    "ContractCodeConfig",
    "ImportConfig",
    "DEFAULT_COLLECTIONS",
    "DEFAULT_TABLES",
]


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
class CollectionConfig:
    """Where a reference collection lives in the database."""
    table: str
    id_column: str = "id"
    name_column: str = "name"
    code_column: str | None = None  # unit code / partner short name


@dataclass(frozen=True)
class ContractCodeConfig:
    """Shape of generated contract codes: ``HD_007/BIM``."""
    prefix: str = "HD"
    width: int = 3
    fallback_unit_code: str = "CIC"


DEFAULT_COLLECTIONS: dict[str, CollectionConfig] = {
    "units": CollectionConfig(table="units", code_column="code"),
    "partners": CollectionConfig(table="customers", code_column="short_name"),
    "employees": CollectionConfig(table="employees"),
}

DEFAULT_TABLES: dict[str, str] = {
    "contract": "contracts",
    "partner": "customers",
    "product": "products",
    "employee": "employees",
}


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import tool."""
    log_dir: str = "logs"
    resolver: str = "containment"  # containment | exact
    mock_data: str | None = None  # YAML seed for the in-memory repository
    contract_code: ContractCodeConfig = field(default_factory=ContractCodeConfig)
    tables: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TABLES))
    collections: dict[str, CollectionConfig] = field(default_factory=lambda: dict(DEFAULT_COLLECTIONS))
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
