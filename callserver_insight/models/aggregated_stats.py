from __future__ import annotations

from dataclasses import dataclass

from .server_record import ServerRecord

"""AggregatedStats model: the per-period summary handed to dashboards and reports."""

__all__ = [
    "AggregatedStats",
]


@dataclass(frozen=True)
class AggregatedStats:
    """Per-period aggregate across all files of one aggregation pass.

    Grand totals are sums of the rounded per-server averages, so
    total_idle + total_busy + total_fault == total_calls always holds.
    Utilization values keep full precision; rounding to two places is a
    presentation concern (see services.report.format_percent).
    """
    total_idle: int
    total_busy: int
    total_fault: int
    total_calls: int
    avg_idle: int  # 元ツール互換: grand total と同値
    avg_busy: int
    avg_fault: int
    utilization_idle: float
    utilization_busy: float
    utilization_fault: float
    server_breakdown: tuple[ServerRecord, ...] = ()  # server_ip 昇順 (locale collation)
    file_count: int = 0

    @property
    def server_count(self) -> int:
        return len(self.server_breakdown)
