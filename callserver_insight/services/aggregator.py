from __future__ import annotations

import locale
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..models.aggregated_stats import AggregatedStats
from ..models.processed_file import ProcessedFile
from ..models.server_record import Number, ServerRecord
from .rounding import round_half_up

logger = logging.getLogger(__name__)

"""Aggregator: the single "reduce" step over the processed files of one period.

For every server (keyed by trimmed server id) the idle/busy/fault sums across
all files are divided by the number of files in the pass, not by the number
of files that mention the server. A server missing from a file therefore
counts as zero for that file.

Each average is rounded on its own, and the server's total is rebuilt as
idle + busy + fault *after* rounding. The source TOTAL column is not averaged.
Grand totals are the sum of those rounded rows, so the arithmetic of every
displayed row (and of the grand total) is exact.
"""

__all__ = [
    "AggregationError",
    "NoUsableDataError",
    "server_sort_key",
    "utilization",
    "aggregate",
]

NO_USABLE_DATA_MESSAGE = "No valid data rows or TOTAL rows found in uploaded files."


class AggregationError(Exception):
    """Base exception for aggregation errors."""


class NoUsableDataError(AggregationError):
    """No file in the batch produced a server row or a TOTAL row."""

    def __init__(self, message: str = NO_USABLE_DATA_MESSAGE) -> None:
        super().__init__(message)


@dataclass
class _ServerSums:
    idle: Number = 0
    busy: Number = 0
    fault: Number = 0
    total: Number = 0  # 参考値 (集計結果には使わない)

    def add(self, record: ServerRecord) -> None:
        self.idle += record.idle
        self.busy += record.busy
        self.fault += record.fault
        self.total += record.total


def server_sort_key(server_ip: str) -> str:
    """Locale-aware collation key for server identifiers."""
    return locale.strxfrm(server_ip)


def utilization(part: int, whole: int) -> float:
    """part / whole * 100, or 0 when whole is 0."""
    if whole == 0:
        return 0.0
    return part / whole * 100


def _sum_servers(files: Sequence[ProcessedFile]) -> dict[str, _ServerSums]:
    sums: dict[str, _ServerSums] = {}
    for processed in files:
        for record in processed.records:
            ip = record.server_ip.strip()
            if not ip:
                continue
            sums.setdefault(ip, _ServerSums()).add(record)
    return sums


def aggregate(files: Sequence[ProcessedFile]) -> AggregatedStats:
    """Aggregate the processed files of one period.

    Raises:
        NoUsableDataError: no file has a server row or a TOTAL row
    """
    if not any(f.has_data for f in files):
        raise NoUsableDataError()

    file_count = len(files)
    sums = _sum_servers(files)

    breakdown: list[ServerRecord] = []
    for ip, s in sums.items():
        idle = round_half_up(s.idle / file_count)
        busy = round_half_up(s.busy / file_count)
        fault = round_half_up(s.fault / file_count)
        breakdown.append(
            ServerRecord(date="", server_ip=ip, idle=idle, busy=busy, fault=fault, total=idle + busy + fault)
        )
    breakdown.sort(key=lambda r: server_sort_key(r.server_ip))

    total_idle = sum(r.idle for r in breakdown)
    total_busy = sum(r.busy for r in breakdown)
    total_fault = sum(r.fault for r in breakdown)
    total_calls = sum(r.total for r in breakdown)

    logger.debug(
        "aggregated files=%d servers=%d calls=%d", file_count, len(breakdown), total_calls
    )

    return AggregatedStats(
        total_idle=total_idle,
        total_busy=total_busy,
        total_fault=total_fault,
        total_calls=total_calls,
        avg_idle=total_idle,
        avg_busy=total_busy,
        avg_fault=total_fault,
        utilization_idle=utilization(total_idle, total_calls),
        utilization_busy=utilization(total_busy, total_calls),
        utilization_fault=utilization(total_fault, total_calls),
        server_breakdown=tuple(breakdown),
        file_count=file_count,
    )
