from __future__ import annotations

from collections.abc import Sequence

from ..models.aggregated_stats import AggregatedStats
from ..models.comparison_period import ComparisonPeriod
from ..models.trend import MetricDelta, PeriodComparison, TrendInsight, TrendPoint
from .rounding import round_percent

"""Period / trend analyzer.

Works on an ordered sequence of ComparisonPeriod values (chronological, the
last one is the current period) that already carry their AggregatedStats.

- Pairwise deltas: relative change for counters, point difference for
  percentages. A change from 0 to a non-zero value counts as +100%.
- Trend: first-vs-last fault utilization and the peak fault period. A zero
  difference is reported as "decreased"; only a strictly positive difference
  is "increased".
"""

__all__ = [
    "INCREASED",
    "DECREASED",
    "percentage_change",
    "point_change",
    "compare_periods",
    "trend_points",
    "analyze_trend",
]

INCREASED = "increased"
DECREASED = "decreased"


def percentage_change(current: float, previous: float) -> float:
    """Relative change from previous to current, in percent.

    0 when both are 0, 100 when only previous is 0.
    """
    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return (current - previous) / previous * 100


def point_change(current: float, previous: float) -> float:
    """Arithmetic difference for metrics that are already percentages."""
    return current - previous


def compare_periods(
    previous: AggregatedStats,
    current: AggregatedStats,
    *,
    previous_label: str = "",
    current_label: str = "",
) -> PeriodComparison:
    """Pairwise comparison of two periods (previous -> current)."""
    deltas = (
        MetricDelta(
            "Total Idle",
            previous.total_idle,
            current.total_idle,
            percentage_change(current.total_idle, previous.total_idle),
        ),
        MetricDelta(
            "Total Busy",
            previous.total_busy,
            current.total_busy,
            percentage_change(current.total_busy, previous.total_busy),
        ),
        MetricDelta(
            "Total Fault",
            previous.total_fault,
            current.total_fault,
            percentage_change(current.total_fault, previous.total_fault),
        ),
        MetricDelta(
            "Fault Utilization",
            previous.utilization_fault,
            current.utilization_fault,
            point_change(current.utilization_fault, previous.utilization_fault),
            is_points=True,
        ),
    )
    return PeriodComparison(
        previous_label=previous_label,
        current_label=current_label,
        deltas=deltas,
        calls_direction=INCREASED if current.total_calls >= previous.total_calls else DECREASED,
        calls_difference=abs(current.total_calls - previous.total_calls),
        fault_shift_points=point_change(current.utilization_fault, previous.utilization_fault),
    )


def trend_points(periods: Sequence[ComparisonPeriod]) -> list[TrendPoint]:
    """Chart series: one point per period that carries stats, in order."""
    points: list[TrendPoint] = []
    for idx, period in enumerate(periods):
        stats = period.stats
        if stats is None:
            continue
        points.append(
            TrendPoint(
                index=idx,
                period_id=period.id,
                label=period.label,
                idle=stats.total_idle,
                busy=stats.total_busy,
                fault=stats.total_fault,
                total=stats.total_calls,
                fault_pct=round_percent(stats.utilization_fault),
                idle_pct=round_percent(stats.utilization_idle),
            )
        )
    return points


def analyze_trend(periods: Sequence[ComparisonPeriod]) -> TrendInsight | None:
    """Fault trend across periods, or None when fewer than two have stats."""
    points = trend_points(periods)
    if len(points) < 2:
        return None

    first, last = points[0], points[-1]
    fault_diff = last.fault_pct - first.fault_pct
    # max() は最初の最大値を返す (同値なら先頭優先)
    peak = max(points, key=lambda p: p.fault_pct)

    return TrendInsight(
        direction=INCREASED if fault_diff > 0 else DECREASED,
        magnitude=round_percent(abs(fault_diff)),
        peak_index=peak.index,
        peak_label=peak.label,
        peak_value=peak.fault_pct,
        period_count=len(points),
    )
