from __future__ import annotations

"""Exception hierarchy for the bulk import pipeline.

Only session-level problems are raised. Row-level validation and reference
resolution problems are carried as strings on ``ParsedRow.errors`` and
persistence failures are collected into ``BatchResult.failures``.
"""

__all__ = [
    "BulkImportError",
    "ParseError",
    "PersistenceError",
    "SessionStateError",
]


class BulkImportError(Exception):
    """Base exception for the import pipeline."""


class ParseError(BulkImportError):
    """Raised when the uploaded file cannot be decoded as a spreadsheet."""


class PersistenceError(BulkImportError):
    """Raised by repositories when a read or create call fails."""


class SessionStateError(BulkImportError):
    """Raised on an illegal import session transition."""
