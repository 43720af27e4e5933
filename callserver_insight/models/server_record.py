from __future__ import annotations

from dataclasses import dataclass

"""ServerRecord model for the call-server usage aggregator.

A ServerRecord is the canonical unit produced by the row normalizer: one
monitored server (or one file-level TOTAL line) for one reporting period.
Metric fields are plain numbers; the normalizer guarantees they are finite
and default to 0 when the source cell is missing or non-numeric.
"""

__all__ = [
    "Number",
    "ServerRecord",
]

Number = int | float


@dataclass(frozen=True)
class ServerRecord:
    """Canonical per-server metric row (idle/busy/fault/total counters)."""
    date: str  # 元ファイルの DATE 列 (集計行では空文字)
    server_ip: str  # SERVER 列 (保持される行では非空)
    idle: Number = 0
    busy: Number = 0
    fault: Number = 0
    total: Number = 0

    @property
    def component_sum(self) -> Number:
        """idle + busy + fault, the reconciled total for aggregated rows."""
        return self.idle + self.busy + self.fault
