from __future__ import annotations

from dataclasses import dataclass, field

"""Reference collections used for free-text lookups during an import."""

__all__ = [
    "ReferenceEntity",
    "ImportContext",
    "UNITS",
    "PARTNERS",
    "EMPLOYEES",
    "COLLECTIONS",
]

UNITS = "units"
PARTNERS = "partners"
EMPLOYEES = "employees"
COLLECTIONS = (UNITS, PARTNERS, EMPLOYEES)


@dataclass(frozen=True)
class ReferenceEntity:
    id: str
    name: str
    code: str | None = None  # unit code / partner short name


@dataclass(frozen=True)
class ImportContext:
    """Session-scoped, read-only snapshot of the reference collections.

    Loaded once when an import session opens and dropped when it closes.
    The pipeline only reads from it.
    """
    collections: dict[str, tuple[ReferenceEntity, ...]] = field(default_factory=dict)

    @classmethod
    def load(cls, repository, names: tuple[str, ...] = COLLECTIONS) -> ImportContext:
        return cls({name: tuple(repository.list_all(name)) for name in names})

    def collection(self, name: str) -> tuple[ReferenceEntity, ...]:
        return self.collections.get(name, ())

    def get(self, name: str, entity_id: str | None) -> ReferenceEntity | None:
        if entity_id is None:
            return None
        for entity in self.collection(name):
            if entity.id == entity_id:
                return entity
        return None
