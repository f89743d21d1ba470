from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the structured error log.

Every rejected row, failed create and fatal parse error of a run becomes
one JSON Lines record with a fixed key set. ``row`` is -1 for file-level
errors where no row applies.
"""

__all__ = [
    "ErrorRecord",
    "PARSE_ERROR",
    "ROW_VALIDATION_ERROR",
    "REFERENCE_NOT_FOUND",
    "PERSISTENCE_ERROR",
]

PARSE_ERROR = "PARSE_ERROR"
ROW_VALIDATION_ERROR = "ROW_VALIDATION_ERROR"
REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: spreadsheet file name being imported
        entity: target entity (contract, partner, product)
        row: 1-based row number, -1 for file-level errors
        error_type: error classification in UPPER_SNAKE_CASE
        message: human-readable message
    """
    timestamp: str
    file: str
    entity: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, entity: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            entity=entity,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # no extra keys: the log schema is fixed
        return json.dumps(asdict(self), ensure_ascii=False)
