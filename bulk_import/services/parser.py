from __future__ import annotations

import logging
from collections.abc import Iterable

from ..excel.reader import HEADER_ROWS
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import REFERENCE_NOT_FOUND, ROW_VALIDATION_ERROR, ErrorRecord
from ..models.reference import ImportContext
from ..models.rows import ParsedRow, ParsedSet, RawRow
from ..schemas.base import EntitySchema
from .resolver import ContainmentResolver, ReferenceResolver
from .validation import DuplicateDetector, validate_row

"""Parse pass: raw rows -> ParsedSet.

Normalizes every raw row through the schema's column normalizers, then runs
the row validator with a fresh duplicate detector. Invalid rows stay in the
set with their error messages so the preview can show them.
"""

__all__ = [
    "parse_rows",
]

logger = logging.getLogger(__name__)


def parse_rows(
    raw_rows: Iterable[RawRow],
    schema: EntitySchema,
    context: ImportContext,
    resolver: ReferenceResolver | None = None,
    *,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
) -> ParsedSet:
    """Normalize and validate ``raw_rows`` for ``schema``.

    Row numbers start at 2 (row 1 is the header). Every error message of an
    invalid row is also appended to ``error_log`` when one is given.
    """
    resolver = resolver or ContainmentResolver()
    detector = DuplicateDetector(schema.key_label)
    detector.reset()

    parsed: list[ParsedRow] = []
    for offset, raw in enumerate(raw_rows, start=1):
        row_index = offset + HEADER_ROWS
        data = schema.project(raw)
        check = validate_row(data, schema, context, resolver, detector)
        row = ParsedRow(row_index=row_index, data=data, errors=check.errors, references=check.references)
        parsed.append(row)

        if not row.is_valid:
            logger.debug("row %d invalid: %s", row_index, "; ".join(row.errors))
            if error_log is not None:
                for message in row.errors:
                    error_type = REFERENCE_NOT_FOUND if message in check.unresolved else ROW_VALIDATION_ERROR
                    error_log.append(ErrorRecord.create(file_name, schema.name, row_index, error_type, message))

    result = ParsedSet(tuple(parsed))
    logger.debug(
        "parsed entity=%s rows=%d valid=%d invalid=%d",
        schema.name, len(result), result.valid_count, result.invalid_count,
    )
    return result
