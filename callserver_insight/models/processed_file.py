from __future__ import annotations

from dataclasses import dataclass

from .server_record import ServerRecord

"""ProcessedFile model.

One ProcessedFile is produced per decoded input file. It is immutable after
creation and only lives for the duration of one aggregation pass.
"""

__all__ = [
    "ProcessedFile",
]


@dataclass(frozen=True)
class ProcessedFile:
    """Normalized content of a single usage file.

    records keeps server rows in encounter order. file_total_row is the
    designated TOTAL line of the file (the last one seen), never merged into
    records.
    """
    file_name: str
    records: tuple[ServerRecord, ...] = ()
    file_total_row: ServerRecord | None = None

    @property
    def has_data(self) -> bool:
        return bool(self.records) or self.file_total_row is not None
