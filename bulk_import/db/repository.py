from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any, Protocol

import yaml

from ..errors import PersistenceError
from ..models.reference import COLLECTIONS, EMPLOYEES, PARTNERS, ReferenceEntity

"""Repository protocol and the in-memory adapter.

The pipeline talks to storage only through three calls: list a reference
collection, create one entity, and ask for the next contract sequence
number of a unit in a year. ``InMemoryRepository`` backs mock mode
(``DISABLE_DB_CONNECT=1``) and the tests; it can be seeded from YAML::

    units:
      - {id: u-bim, name: Trung tâm BIM, code: BIM}
    partners:
      - {id: c-abc, name: Công ty ABC, code: ABC}
    employees:
      - {id: e-1, name: Nguyễn Văn A}
    contracts:   # existing rows, only used for sequence numbers
      - {id: HD_001/BIM, unit_id: u-bim, signed_date: 2024-03-01}
"""

__all__ = [
    "Repository",
    "InMemoryRepository",
]


class Repository(Protocol):
    def list_all(self, collection: str) -> list[ReferenceEntity]: ...

    def create(self, entity: str, payload: dict[str, Any]) -> str: ...

    def next_sequence_number(self, unit_id: str | None, year: int) -> int: ...


class InMemoryRepository:
    """Dict-backed repository.

    Created partners and employees are added to their reference
    collections, like the real tables would; the snapshot of an already
    open session does not see them. Creating two records with the same id fails.
    """

    def __init__(
        self,
        collections: dict[str, list[ReferenceEntity]] | None = None,
        records: dict[str, list[dict[str, Any]]] | None = None,
    ) -> None:
        self.collections: dict[str, list[ReferenceEntity]] = {
            name: list((collections or {}).get(name, [])) for name in COLLECTIONS
        }
        self.records: dict[str, list[dict[str, Any]]] = {k: list(v) for k, v in (records or {}).items()}
        self._counter = itertools.count(1)

    @classmethod
    def from_yaml(cls, path: Path | str) -> InMemoryRepository:
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(f"cannot read mock data {path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"mock data must be a mapping: {path}")

        collections = {
            name: [
                ReferenceEntity(
                    id=str(item["id"]),
                    name=str(item.get("name", "")),
                    code=None if item.get("code") is None else str(item["code"]),
                )
                for item in data.get(name) or []
            ]
            for name in COLLECTIONS
        }
        contracts = [
            {k: (str(v) if v is not None else None) for k, v in item.items()}
            for item in data.get("contracts") or []
        ]
        return cls(collections, {"contract": contracts})

    def list_all(self, collection: str) -> list[ReferenceEntity]:
        return list(self.collections.get(collection, []))

    def create(self, entity: str, payload: dict[str, Any]) -> str:
        stored = self.records.setdefault(entity, [])
        new_id = str(payload.get("id") or f"{entity}-{next(self._counter)}")
        if any(r.get("id") == new_id for r in stored):
            raise PersistenceError(f"{entity} '{new_id}' already exists")
        record = {**payload, "id": new_id}
        stored.append(record)
        if entity == "partner":
            self.collections[PARTNERS].append(
                ReferenceEntity(id=new_id, name=record.get("name", ""), code=record.get("short_name"))
            )
        elif entity == "employee":
            self.collections[EMPLOYEES].append(
                ReferenceEntity(id=new_id, name=record.get("name", ""), code=record.get("employee_code"))
            )
        return new_id

    def next_sequence_number(self, unit_id: str | None, year: int) -> int:
        prefix = f"{year:04d}-"
        count = sum(
            1
            for r in self.records.get("contract", [])
            if r.get("unit_id") == unit_id and str(r.get("signed_date") or "").startswith(prefix)
        )
        return count + 1
