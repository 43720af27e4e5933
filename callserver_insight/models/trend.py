from __future__ import annotations

from dataclasses import dataclass

"""Trend / comparison value objects produced by services.trend."""

__all__ = [
    "MetricDelta",
    "PeriodComparison",
    "TrendPoint",
    "TrendInsight",
]


@dataclass(frozen=True)
class MetricDelta:
    """Change of one metric between two periods.

    change is a relative percentage for counters, and an arithmetic
    difference (percentage points) when is_points is True.
    """
    label: str
    previous: float
    current: float
    change: float
    is_points: bool = False

    @property
    def direction(self) -> str:
        if self.change > 0:
            return "up"
        if self.change < 0:
            return "down"
        return "flat"


@dataclass(frozen=True)
class PeriodComparison:
    """Pairwise comparison of a previous and a current period."""
    previous_label: str
    current_label: str
    deltas: tuple[MetricDelta, ...]
    calls_direction: str  # "increased" | "decreased"
    calls_difference: int  # 絶対値
    fault_shift_points: float  # 符号付き (current - previous)

    def delta(self, label: str) -> MetricDelta:
        for d in self.deltas:
            if d.label == label:
                return d
        raise KeyError(label)


@dataclass(frozen=True)
class TrendPoint:
    """One period in a trend series (chart data).

    Percentages are rounded to two places, matching what is displayed.
    """
    index: int  # 元の period 列内での位置
    period_id: str
    label: str
    idle: int
    busy: int
    fault: int
    total: int
    fault_pct: float
    idle_pct: float


@dataclass(frozen=True)
class TrendInsight:
    """Multi-period insight: first-to-last fault trend and the peak period."""
    direction: str  # "increased" | "decreased"
    magnitude: float  # |last - first| (2 桁丸め)
    peak_index: int
    peak_label: str
    peak_value: float
    period_count: int
