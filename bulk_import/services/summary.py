from __future__ import annotations

from ..models.batch_result import BatchResult, ImportReport
from ..models.rows import ParsedRow, ParsedSet

"""Report aggregator.

Renders the one-line PREVIEW and SUMMARY formats and the per-row failure
lines. Both lines are ``key=value`` pairs separated by single spaces so they
stay greppable in CI logs.
"""

__all__ = [
    "build_report",
    "render_preview_line",
    "render_summary_line",
    "render_failures",
    "first_error",
    "format_seconds",
]


def build_report(
    entity: str,
    parsed: ParsedSet,
    result: BatchResult | None = None,
    elapsed: float = 0.0,
) -> ImportReport:
    return ImportReport(
        entity=entity,
        total_rows=len(parsed),
        valid_rows=parsed.valid_count,
        invalid_rows=parsed.invalid_count,
        result=result,
        elapsed_seconds=elapsed,
    )


def format_seconds(value: float) -> str:
    """Integers without a decimal part, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_preview_line(report: ImportReport) -> str:
    return (
        f"PREVIEW entity={report.entity} "
        f"rows={report.total_rows} "
        f"valid={report.valid_rows} "
        f"invalid={report.invalid_rows}"
    )


def render_summary_line(report: ImportReport) -> str:
    """Render the SUMMARY line of a finished import.

    Format:
    SUMMARY entity={e} rows={n} valid={v} invalid={i} success={s}
    failed={f} skipped={k} elapsed_sec={t}

    A report without a BatchResult (dry run) prints zero for the import
    counters.

    Examples:
        >>> from bulk_import.models import BatchResult, ImportReport
        >>> report = ImportReport("contract", 3, 1, 2, BatchResult(success_count=1, attempted=1), 2.0)
        >>> render_summary_line(report)
        'SUMMARY entity=contract rows=3 valid=1 invalid=2 success=1 failed=0 skipped=0 elapsed_sec=2'
    """
    result = report.result or BatchResult()
    return (
        f"SUMMARY entity={report.entity} "
        f"rows={report.total_rows} "
        f"valid={report.valid_rows} "
        f"invalid={report.invalid_rows} "
        f"success={result.success_count} "
        f"failed={result.failed_count} "
        f"skipped={result.skipped} "
        f"elapsed_sec={format_seconds(report.elapsed_seconds)}"
    )


def render_failures(result: BatchResult) -> list[str]:
    return [f"Row {f.row_index}: {f.message}" for f in result.failures]


def first_error(row: ParsedRow) -> str:
    """First error of a row for one-line preview tables; '' for valid rows."""
    return row.errors[0] if row.errors else ""
