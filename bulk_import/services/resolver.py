from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ..models.reference import ReferenceEntity

"""Reference resolver strategies.

A resolver maps the free text typed in a spreadsheet cell (unit code, partner
name, employee name) onto the id of an entity in a session snapshot. Both
strategies are pure lookups; an unresolved value returns None and the row
validator turns that into a row error.
"""

__all__ = [
    "ReferenceResolver",
    "ContainmentResolver",
    "ExactResolver",
    "get_resolver",
]


class ReferenceResolver(Protocol):
    def resolve(self, text: str, collection: Sequence[ReferenceEntity]) -> str | None: ...


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


class ContainmentResolver:
    """Case-insensitive match: code equality or name containment.

    The first entity in collection order wins, without scoring, so two
    similarly named entities can resolve to the earlier one. Accents are
    preserved: 'Hà Nội' does not match 'ha noi'.
    """

    def resolve(self, text: str, collection: Sequence[ReferenceEntity]) -> str | None:
        needle = _norm(text)
        if not needle:
            return None
        for entity in collection:
            if entity.code is not None and _norm(entity.code) == needle:
                return entity.id
            if needle in _norm(entity.name):
                return entity.id
        return None


class ExactResolver:
    """Stricter variant: code or full name must equal the input."""

    def resolve(self, text: str, collection: Sequence[ReferenceEntity]) -> str | None:
        needle = _norm(text)
        if not needle:
            return None
        for entity in collection:
            if needle in (_norm(entity.code), _norm(entity.name)):
                return entity.id
        return None


_RESOLVERS: dict[str, type] = {
    "containment": ContainmentResolver,
    "exact": ExactResolver,
}


def get_resolver(name: str = "containment") -> ReferenceResolver:
    try:
        return _RESOLVERS[name]()
    except KeyError:
        raise ValueError(f"unknown resolver: {name!r} (choose from {sorted(_RESOLVERS)})") from None
