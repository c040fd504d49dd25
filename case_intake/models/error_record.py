from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

One ErrorRecord per rejected, skipped or failed roster row. Row -1 is the
sentinel for file-level errors where no line can be attributed (unreadable
file, store connection lost before the first row).
"""

__all__ = [
    "ErrorRecord",
    "VALIDATION_ERROR",
    "IMPORT_ERROR",
    "SKIPPED_ROW",
    "FILE_ERROR",
]

VALIDATION_ERROR = "VALIDATION_ERROR"
IMPORT_ERROR = "IMPORT_ERROR"
SKIPPED_ROW = "SKIPPED_ROW"
FILE_ERROR = "FILE_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Roster filename being processed
        row: Physical line number (1-based). Use -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable description (validation messages are joined with '; ')
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int  # 行番号。不明な場合 -1 許容
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (no extra keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
