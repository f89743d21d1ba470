from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..models.reference import ImportContext
from .normalize import is_iso_date
from .resolver import ReferenceResolver

if TYPE_CHECKING:
    from ..schemas.base import EntitySchema, Rule

"""Row validator and duplicate detector.

All rules of a schema run for every row, in a fixed order, so the preview
shows every problem at once:

1. required fields
2. natural-key uniqueness within the file
3. reference resolvability
4. schema rules (numeric ranges, closed sets, date and email formats)
"""

__all__ = [
    "DuplicateDetector",
    "RowCheck",
    "validate_row",
    "non_negative",
    "one_of",
    "valid_date",
    "valid_email",
]

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


class DuplicateDetector:
    """Tracks normalized natural keys seen in the current parse pass.

    The first occurrence of a key is never flagged; empty keys are never
    recorded so blank cells cannot collide with each other.
    """

    def __init__(self, label: str) -> None:
        self.label = label
        self._seen: set[str] = set()

    def reset(self) -> None:
        self._seen.clear()

    def check(self, value: str, key: str | None = None) -> str | None:
        """Flag ``value`` when its key was seen before; ``key`` defaults to trimmed lower-case ``value``."""
        if key is None:
            key = (value or "").strip().lower()
        if not key:
            return None
        if key in self._seen:
            return f"duplicate {self.label} '{value.strip()}' in file"
        self._seen.add(key)
        return None


@dataclass
class RowCheck:
    errors: list[str] = field(default_factory=list)
    references: dict[str, str] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)  # subset of errors


def validate_row(
    data: Any,
    schema: EntitySchema,
    context: ImportContext,
    resolver: ReferenceResolver,
    detector: DuplicateDetector,
) -> RowCheck:
    check = RowCheck()

    for field_name, label in schema.required:
        if not getattr(data, field_name):
            check.errors.append(f"{label} is required")

    duplicate = detector.check(getattr(data, schema.key_field), schema.natural_key(data))
    if duplicate:
        check.errors.append(duplicate)

    for ref in schema.references:
        text = getattr(data, ref.field)
        if not text:
            if ref.required:
                check.errors.append(f"{ref.label} is required")
            continue
        entity_id = resolver.resolve(text, context.collection(ref.collection))
        if entity_id is None:
            message = f"{ref.label} '{text}' not found"
            check.errors.append(message)
            check.unresolved.append(message)
        else:
            check.references[ref.target] = entity_id

    for rule in schema.rules:
        check.errors.extend(rule(data))

    return check


def non_negative(field_name: str, label: str) -> Rule:
    def rule(data: Any) -> Iterable[str]:
        if getattr(data, field_name) < 0:
            yield f"{label} must not be negative"
    return rule


def one_of(field_name: str, label: str, choices: Iterable[str]) -> Rule:
    allowed = tuple(choices)

    def rule(data: Any) -> Iterable[str]:
        value = getattr(data, field_name)
        if value and value not in allowed:
            yield f"{label} '{value}' is not one of: {', '.join(allowed)}"
    return rule


def valid_date(field_name: str, label: str) -> Rule:
    """Non-empty dates must have normalized to YYYY-MM-DD."""
    def rule(data: Any) -> Iterable[str]:
        value = getattr(data, field_name)
        if value and not is_iso_date(value):
            yield f"{label} '{value}' is not a valid date"
    return rule


def valid_email(field_name: str, label: str) -> Rule:
    def rule(data: Any) -> Iterable[str]:
        value = getattr(data, field_name)
        if value and not _EMAIL_PATTERN.fullmatch(value):
            yield f"{label} '{value}' is not a valid email address"
    return rule
