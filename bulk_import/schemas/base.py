from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..db.repository import Repository
from ..models.reference import ImportContext
from ..models.rows import ParsedRow, RawRow

"""Declarative per-entity import schema.

One EntitySchema drives the whole pipeline for an entity: the ordered
template columns with their normalizers, required fields, the natural key
used for duplicate detection, reference declarations, extra validation
rules, the create payload builder and an optional hook that derives
generated fields right before the create call.
"""

__all__ = [
    "ColumnSpec",
    "ReferenceSpec",
    "EntitySchema",
    "Rule",
    "PayloadBuilder",
    "PrepareHook",
]

Rule = Callable[[Any], Iterable[str]]
PayloadBuilder = Callable[[ParsedRow], dict[str, Any]]
# (row, payload, repository, context) -> payload with generated fields
PrepareHook = Callable[[ParsedRow, dict[str, Any], Repository, ImportContext], dict[str, Any]]


@dataclass(frozen=True)
class ColumnSpec:
    field: str
    header: str
    normalize: Callable[[Any], Any]
    width: int = 15  # template column width (characters)


@dataclass(frozen=True)
class ReferenceSpec:
    """A free-text column resolved against a reference collection.

    Required references must resolve. Optional ones only fail when the
    cell is non-empty and nothing matches.
    """
    field: str
    collection: str
    target: str  # key in ParsedRow.references, e.g. unit_id
    label: str
    required: bool = True


@dataclass(frozen=True)
class EntitySchema:
    name: str
    row_type: type
    columns: tuple[ColumnSpec, ...]
    key_field: str
    key_label: str
    required: tuple[tuple[str, str], ...]  # (field, label)
    build_payload: PayloadBuilder
    references: tuple[ReferenceSpec, ...] = ()
    rules: tuple[Rule, ...] = ()
    prepare: PrepareHook | None = None
    samples: tuple[tuple[Any, ...], ...] = ()
    sheet_name: str = "Template"

    @property
    def width(self) -> int:
        return len(self.columns)

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    @property
    def template_file_name(self) -> str:
        return f"template_import_{self.name}s.xlsx"

    @property
    def collections(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(r.collection for r in self.references))

    def project(self, raw: RawRow) -> Any:
        """Build the typed ImportRow from a raw row; missing cells count as empty."""
        values = {
            column.field: column.normalize(raw[i] if i < len(raw) else None)
            for i, column in enumerate(self.columns)
        }
        return self.row_type(**values)

    def natural_key(self, data: Any) -> str:
        """Trimmed lower-case key column; rows sharing it are duplicates."""
        return str(getattr(data, self.key_field) or "").strip().lower()
