from __future__ import annotations

from ..models.config_models import ImportConfig
from .base import ColumnSpec, EntitySchema, ReferenceSpec
from .contract import build_contract_schema
from .employee import build_employee_schema
from .partner import build_partner_schema
from .product import build_product_schema

"""Entity schema registry."""

__all__ = [
    "ColumnSpec",
    "EntitySchema",
    "ReferenceSpec",
    "ENTITY_NAMES",
    "get_schema",
]

ENTITY_NAMES = ("contract", "partner", "product", "employee")


def get_schema(name: str, config: ImportConfig | None = None) -> EntitySchema:
    config = config or ImportConfig()
    if name == "contract":
        return build_contract_schema(config.contract_code)
    if name == "partner":
        return build_partner_schema()
    if name == "product":
        return build_product_schema()
    if name == "employee":
        return build_employee_schema()
    raise ValueError(f"unknown entity: {name!r} (choose from {', '.join(ENTITY_NAMES)})")
