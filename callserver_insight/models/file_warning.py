from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""FileWarning model for skipped-file logging.

Files that cannot be decoded are skipped rather than failing the batch. Each
skip is captured as a FileWarning, reported to the caller and written to the
JSON Lines warning log (see logging.error_log).

The JSON shape is fixed: timestamp, period, file, warning_type, message.
"""

__all__ = [
    "FileWarning",
]


@dataclass(frozen=True)
class FileWarning:
    """Structured warning record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        period: Period label the file was selected for ("" for single runs)
        file: File name that was skipped
        warning_type: Classification in UPPER_SNAKE_CASE format
        message: Underlying decoder message
    """
    timestamp: str  # ISO8601 UTC
    period: str
    file: str
    warning_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(period: str, file: str, warning_type: str, message: str) -> FileWarning:
        """Create a new FileWarning stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return FileWarning(
            timestamp=ts,
            period=period,
            file=file,
            warning_type=warning_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
