from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from ..db.repository import Repository
from ..logging.error_log import ErrorLogBuffer
from ..models.batch_result import BatchResult, RowFailure
from ..models.error_record import PERSISTENCE_ERROR, ErrorRecord
from ..models.reference import ImportContext
from ..models.rows import ParsedRow
from ..schemas.base import EntitySchema
from .progress import ProgressTracker

"""Batch importer.

Creates one entity per valid row, strictly in file order and one at a time:
generated fields such as contract codes depend on what earlier rows of the
same run have already created. A failed create is recorded and the run
moves on; nothing is retried and nothing is rolled back.

Cancellation is cooperative. The token is checked before each row, a row
already in flight always completes, and rows never attempted are reported
as skipped.
"""

__all__ = [
    "CancelToken",
    "run_batch",
]

logger = logging.getLogger(__name__)


class CancelToken:
    """Thread-safe cancellation flag (set from a signal handler or UI thread)."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def run_batch(
    rows: Iterable[ParsedRow],
    schema: EntitySchema,
    repository: Repository,
    context: ImportContext,
    *,
    cancel_token: CancelToken | None = None,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
) -> BatchResult:
    """Create every valid row through ``repository``.

    Invalid rows in ``rows`` are ignored. Returns a BatchResult where
    ``success_count + len(failures) == attempted``; without cancellation
    ``attempted`` equals the number of valid rows.
    """
    valid = [r for r in rows if r.is_valid]
    success = 0
    failures: list[RowFailure] = []
    created: list[str] = []
    attempted = 0
    cancelled = False

    with ProgressTracker(len(valid), description=f"Importing {schema.name}s") as tracker:
        for row in valid:
            if cancel_token is not None and cancel_token.cancelled:
                cancelled = True
                break
            attempted += 1
            try:
                payload = schema.build_payload(row)
                if schema.prepare is not None:
                    payload = schema.prepare(row, payload, repository, context)
                new_id = repository.create(schema.name, payload)
            except Exception as e:
                message = _describe(e)
                failures.append(RowFailure(row.row_index, message))
                logger.warning("row %d: create failed: %s", row.row_index, message)
                if error_log is not None:
                    error_log.append(
                        ErrorRecord.create(file_name, schema.name, row.row_index, PERSISTENCE_ERROR, message)
                    )
            else:
                success += 1
                created.append(new_id)
                logger.debug("row %d: created %s id=%s", row.row_index, schema.name, new_id)
            tracker.advance(success=success, failed=len(failures))

    skipped = len(valid) - attempted
    if cancelled:
        logger.warning("import cancelled: %d of %d valid rows not attempted", skipped, len(valid))

    return BatchResult(
        success_count=success,
        failures=failures,
        attempted=attempted,
        skipped=skipped,
        cancelled=cancelled,
        created=created,
    )
