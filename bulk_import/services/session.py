from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from ..db.repository import Repository
from ..errors import ParseError, SessionStateError
from ..excel.reader import Source, read_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.batch_result import BatchResult, ImportReport
from ..models.error_record import PARSE_ERROR, ErrorRecord
from ..models.reference import ImportContext
from ..models.rows import ParsedSet
from ..models.session_state import ALLOWED_TRANSITIONS, SessionState
from ..schemas.base import EntitySchema
from .batch import CancelToken, run_batch
from .parser import parse_rows
from .resolver import ContainmentResolver, ReferenceResolver
from .summary import build_report

"""Import session: one file, one preview, at most one confirmed import.

The reference collections the schema needs are loaded when the session
opens and dropped, together with the parsed set, when it closes.
"""

__all__ = [
    "ImportSession",
]

logger = logging.getLogger(__name__)


class ImportSession:
    """State machine around the parse / preview / import pipeline.

    Usage::

        with ImportSession(schema, repository) as session:
            parsed = session.load_file(path)
            ...  # show the preview
            result = session.confirm()
    """

    def __init__(
        self,
        schema: EntitySchema,
        repository: Repository,
        *,
        resolver: ReferenceResolver | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.schema = schema
        self.repository = repository
        self.resolver = resolver or ContainmentResolver()
        self.error_log = error_log
        self.state = SessionState.IDLE
        self.context: ImportContext | None = None
        self.parsed: ParsedSet | None = None
        self.result: BatchResult | None = None
        self.file_name = ""
        self._parse_elapsed = 0.0
        self._import_elapsed = 0.0

    def __enter__(self) -> ImportSession:
        return self.open()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _transition(self, target: SessionState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise SessionStateError(f"cannot move import session from {self.state.value} to {target.value}")
        logger.debug("session %s -> %s", self.state.value, target.value)
        self.state = target

    def _snapshot(self) -> ImportContext:
        if self.context is None:
            self.context = ImportContext.load(self.repository, self.schema.collections)
            for name, entities in self.context.collections.items():
                logger.debug("loaded %d %s", len(entities), name)
        return self.context

    def open(self) -> ImportSession:
        """Load the reference snapshot; repeated calls keep the first one."""
        self._snapshot()
        return self

    def close(self) -> None:
        self.context = None
        self.parsed = None

    def load_file(self, source: Source, file_name: str | None = None) -> ParsedSet:
        """Read and parse ``source``; the session then waits for confirmation.

        Raises ParseError (and returns to idle) when the file is unreadable.
        """
        self._transition(SessionState.FILE_LOADED)
        context = self._snapshot()
        if file_name is None:
            file_name = Path(source).name if isinstance(source, (str, Path)) else ""
        self.file_name = file_name
        self.result = None
        self._import_elapsed = 0.0
        started = time.perf_counter()

        try:
            raw_rows = read_rows(source, self.schema.width)
        except ParseError as e:
            if self.error_log is not None:
                self.error_log.append(ErrorRecord.create(file_name, self.schema.name, -1, PARSE_ERROR, str(e)))
            self._transition(SessionState.IDLE)
            raise

        self.parsed = parse_rows(
            raw_rows,
            self.schema,
            context,
            self.resolver,
            error_log=self.error_log,
            file_name=file_name,
        )
        self._parse_elapsed = time.perf_counter() - started
        self._transition(SessionState.PREVIEWING)
        return self.parsed

    def discard(self) -> None:
        """Drop the previewed file without importing anything."""
        self._transition(SessionState.IDLE)
        self.parsed = None
        self.file_name = ""

    def confirm(self, cancel_token: CancelToken | None = None) -> BatchResult:
        """Import the valid rows of the previewed file."""
        parsed, context = self.parsed, self.context
        if parsed is None or context is None:
            raise SessionStateError("import session has no previewed file")
        self._transition(SessionState.IMPORTING)
        started = time.perf_counter()
        try:
            self.result = run_batch(
                parsed,
                self.schema,
                self.repository,
                context,
                cancel_token=cancel_token,
                error_log=self.error_log,
                file_name=self.file_name,
            )
        finally:
            self._import_elapsed = time.perf_counter() - started
            self._transition(SessionState.COMPLETED)
        return self.result

    def report(self) -> ImportReport:
        if self.parsed is None:
            raise SessionStateError("no file has been parsed in this session")
        return build_report(self.schema.name, self.parsed, self.result, self._parse_elapsed + self._import_elapsed)
