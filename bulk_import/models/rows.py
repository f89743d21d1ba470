from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

"""Row models for the spreadsheet import pipeline.

RawRow is the untyped cell tuple produced by the tabular reader. Each entity
has a frozen ImportRow dataclass holding the normalized plain values, and
ParsedRow wraps it with the validation outcome and resolved reference ids.
"""

__all__ = [
    "RawRow",
    "ContractImportRow",
    "PartnerImportRow",
    "ProductImportRow",
    "EmployeeImportRow",
    "ParsedRow",
    "ParsedSet",
]

RawRow = tuple[Any, ...]

T = TypeVar("T")


@dataclass(frozen=True)
class ContractImportRow:
    title: str
    contract_type: str
    partner_name: str
    unit_code: str
    salesperson_name: str
    value: float
    estimated_cost: float
    signed_date: str
    start_date: str
    end_date: str
    status: str
    category: str


@dataclass(frozen=True)
class PartnerImportRow:
    name: str
    short_name: str
    tax_code: str
    industry: str
    partner_type: str  # Customer | Supplier
    address: str
    phone: str
    email: str
    contact_person: str


@dataclass(frozen=True)
class ProductImportRow:
    code: str
    name: str
    category: str
    description: str
    measure_unit: str
    base_price: float
    cost_price: float
    unit_name: str


@dataclass(frozen=True)
class EmployeeImportRow:
    employee_code: str
    name: str
    email: str  # lower-cased
    phone: str
    telegram: str
    unit_name: str
    position: str
    role_code: str  # one of the known roles or ""
    date_of_birth: str
    gender: str  # male | female | other | ""
    id_number: str
    address: str
    education: str
    specialization: str
    certificates: str
    date_joined: str
    contract_type: str
    bank_account: str
    bank_name: str


@dataclass(frozen=True)
class ParsedRow(Generic[T]):
    """One parsed spreadsheet row with its validation outcome.

    ``row_index`` is the 1-based row number shown to users (header is row 1,
    so the first data row is 2). ``references`` maps resolved id fields such
    as ``unit_id`` to entity ids; unresolved references are absent.
    """
    row_index: int
    data: T
    errors: tuple[str, ...] = ()
    references: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "references", MappingProxyType(dict(self.references)))

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def reference(self, name: str) -> str | None:
        return self.references.get(name)


@dataclass(frozen=True)
class ParsedSet(Generic[T]):
    """Ordered result of one parse pass, held for the preview."""
    rows: tuple[ParsedRow[T], ...] = ()

    def __iter__(self):
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def valid_rows(self) -> list[ParsedRow[T]]:
        return [r for r in self.rows if r.is_valid]

    @property
    def invalid_rows(self) -> list[ParsedRow[T]]:
        return [r for r in self.rows if not r.is_valid]

    @property
    def valid_count(self) -> int:
        return len(self.valid_rows)

    @property
    def invalid_count(self) -> int:
        return len(self.rows) - self.valid_count
