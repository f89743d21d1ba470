from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import BulkImportError
from ..models.config_models import (
    DEFAULT_COLLECTIONS,
    DEFAULT_TABLES,
    CollectionConfig,
    ContractCodeConfig,
    DatabaseConfig,
    ImportConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML config (default ``config/import.yml``)
- Validate it against the bundled JSON schema (``config_schema.json``)
- Apply defaults for every section the file leaves out
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(BulkImportError):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: if the schema file is missing or unreadable, or the
            config data fails validation (unknown keys, wrong types, ...).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _collections(raw: dict[str, Any]) -> dict[str, CollectionConfig]:
    merged = dict(DEFAULT_COLLECTIONS)
    for name, entry in raw.items():
        default = DEFAULT_COLLECTIONS[name]
        merged[name] = CollectionConfig(
            table=entry["table"],
            id_column=entry.get("id_column", default.id_column),
            name_column=entry.get("name_column", default.name_column),
            code_column=entry.get("code_column", default.code_column),
        )
    return merged


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    code_raw = data.get("contract_code") or {}
    defaults = ContractCodeConfig()
    contract_code = ContractCodeConfig(
        prefix=code_raw.get("prefix", defaults.prefix),
        width=code_raw.get("width", defaults.width),
        fallback_unit_code=code_raw.get("fallback_unit_code", defaults.fallback_unit_code),
    )
    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    mock_data = data.get("mock_data")
    if mock_data:
        # relative seed paths are resolved against the config file
        mock_path = Path(mock_data)
        if not mock_path.is_absolute():
            mock_path = path.parent / mock_path
        mock_data = str(mock_path)

    return ImportConfig(
        log_dir=data.get("log_dir", "logs"),
        resolver=data.get("resolver", "containment"),
        mock_data=mock_data,
        contract_code=contract_code,
        tables={**DEFAULT_TABLES, **(data.get("tables") or {})},
        collections=_collections(data.get("collections") or {}),
        database=db,
    )
