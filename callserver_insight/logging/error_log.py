from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.file_warning import FileWarning

"""Skipped-file warning log (JSON Lines).

- Fixed schema per line (timestamp, period, file, warning_type, message)
- One file per run: logs/warnings-YYYYMMDD-HHMMSS.log (UTC), created lazily
- Records are buffered and written on flush()
"""

__all__ = [
    "FileWarning",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for warning records. Flush writes JSON Lines.

    - ファイルパスは初回アクセスで決定
    - append/flush は収集スレッドからのみ呼ぶ (スレッド安全性不要)
    """
    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._records: list[FileWarning] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"warnings-{stamp}.log"
        return self._file_path

    def append(self, record: FileWarning) -> None:
        self._records.append(record)

    def extend(self, records: tuple[FileWarning, ...] | list[FileWarning]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when nothing was buffered."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
