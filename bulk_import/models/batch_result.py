from __future__ import annotations

from dataclasses import dataclass, field

"""Result models for the batch importer and the report aggregator.

BatchResult is finalized once every valid row has been attempted (or the
run was cancelled). ImportReport joins it with the preview counts.
"""

__all__ = [
    "RowFailure",
    "BatchResult",
    "ImportReport",
]


@dataclass(frozen=True)
class RowFailure:
    row_index: int
    message: str


@dataclass(frozen=True)
class BatchResult:
    """Per-row outcome of one confirmed import.

    ``success_count + len(failures) == attempted`` always holds. ``skipped``
    counts valid rows that were never attempted because the run was cancelled.
    """
    success_count: int = 0
    failures: list[RowFailure] = field(default_factory=list)
    attempted: int = 0
    skipped: int = 0
    cancelled: bool = False
    created: list[str] = field(default_factory=list)  # ids returned by the repository

    @property
    def failed_count(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class ImportReport:
    entity: str
    total_rows: int
    valid_rows: int
    invalid_rows: int
    result: BatchResult | None = None  # None until the import is confirmed
    elapsed_seconds: float = 0.0
