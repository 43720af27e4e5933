from __future__ import annotations

from ..models.processing_result import RunResult
from .rounding import round_percent

"""Summary line rendering service.

Format:
SUMMARY periods={n} files={processed}/{total} skipped={skipped} servers={k}
calls={calls} idle_pct={x} busy_pct={y} fault_pct={z}

Server and call figures describe the current (last) period.
"""


def _pct(value: float) -> str:
    return f"{round_percent(value):.2f}"


def render_summary_line(result: RunResult) -> str:
    """Render a SUMMARY line from a RunResult.

    Examples:
        >>> from callserver_insight.models import AggregatedStats, ReportDocument
        >>> from callserver_insight.models import RunResult
        >>> stats = AggregatedStats(100, 50, 10, 160, 100, 50, 10, 62.5, 31.25, 6.25)
        >>> doc = ReportDocument("t", "s", "May 2025", 0, stats)
        >>> render_summary_line(RunResult(period_results=(), report=doc))  # doctest: +ELLIPSIS
        'SUMMARY periods=0 files=0/0 skipped=0 servers=0 calls=160 idle_pct=62.50 ...'
    """
    stats = result.report.stats
    return (
        f"SUMMARY periods={len(result.period_results)} "
        f"files={result.processed_files}/{result.total_files} "
        f"skipped={result.skipped_files} "
        f"servers={stats.server_count} "
        f"calls={stats.total_calls} "
        f"idle_pct={_pct(stats.utilization_idle)} "
        f"busy_pct={_pct(stats.utilization_busy)} "
        f"fault_pct={_pct(stats.utilization_fault)}"
    )
