from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from ..models.aggregated_stats import AggregatedStats
from ..models.comparison_period import ComparisonPeriod
from ..models.report_document import ReportDocument
from .rounding import round_half_up, round_percent
from .trend import analyze_trend

logger = logging.getLogger(__name__)

"""Report payload assembly.

Builds the ReportDocument handed to the document-generation sink: the current
(last) period's statistics, the earlier periods as history, pre-formatted
table cells and the caller-editable title and summary. Layout and file
format belong to the sink; write_report_json is the bundled JSON sink.
"""

__all__ = [
    "ReportError",
    "SERVER_TABLE_HEADER",
    "format_percent",
    "format_count",
    "default_title",
    "default_summary",
    "server_table_rows",
    "comparison_table_rows",
    "build_report",
    "write_report_json",
]

SERVER_TABLE_HEADER = ("SERVER", "IDLE", "BUSY", "FAULT", "TOTAL")


class ReportError(Exception):
    """Raised when a report cannot be assembled from the given periods."""


def format_percent(value: float) -> str:
    return f"{round_percent(value):.2f}%"


def format_count(value: int) -> str:
    return f"{value:,}"


def default_title(label: str) -> str:
    return f"Call Server Utilization Report for {label}"


def default_summary(stats: AggregatedStats, label: str) -> str:
    """Templated executive summary embedding the rounded idle utilization."""
    rounded = round_half_up(stats.utilization_idle)
    return (
        f"This report provides a summary of {rounded}% utilization for the call servers "
        f"monitored for {label}. The data includes user distribution across call servers, "
        "with segmentation into online (idle) and offline (fault) states. Key performance "
        "insights and utilization percentages are presented below."
    )


def server_table_rows(stats: AggregatedStats) -> tuple[tuple[str, ...], ...]:
    """Header, one row per server, TOTAL and UTILIZATION rows."""
    rows: list[tuple[str, ...]] = [SERVER_TABLE_HEADER]
    for s in stats.server_breakdown:
        rows.append((s.server_ip, str(s.idle), str(s.busy), str(s.fault), str(s.total)))
    rows.append(
        (
            "TOTAL",
            str(stats.total_idle),
            str(stats.total_busy),
            str(stats.total_fault),
            str(stats.total_calls),
        )
    )
    rows.append(
        (
            "UTILIZATION",
            format_percent(stats.utilization_idle),
            format_percent(stats.utilization_busy),
            format_percent(stats.utilization_fault),
            "",
        )
    )
    return tuple(rows)


def comparison_table_rows(
    timeline: Sequence[tuple[str, AggregatedStats]],
) -> tuple[tuple[str, ...], ...]:
    """METRIC x period table, oldest period first."""
    header = ("METRIC", *(label for label, _ in timeline))
    metrics = (
        ("Total Volume", lambda s: format_count(s.total_calls)),
        ("Idle Count", lambda s: format_count(s.total_idle)),
        ("Fault Count", lambda s: format_count(s.total_fault)),
        ("Fault %", lambda s: format_percent(s.utilization_fault)),
        ("Idle %", lambda s: format_percent(s.utilization_idle)),
    )
    rows = [header]
    for name, accessor in metrics:
        rows.append((name, *(accessor(stats) for _, stats in timeline)))
    return tuple(rows)


def build_report(
    periods: Sequence[ComparisonPeriod],
    title: str | None = None,
    summary: str | None = None,
) -> ReportDocument:
    """Assemble the report for the last period, with earlier periods as history.

    Blank or missing title / summary fall back to the templated defaults.

    Raises:
        ReportError: no periods, or the current period has no stats
    """
    if not periods:
        raise ReportError("no periods to report on")
    main = periods[-1]
    if main.stats is None:
        raise ReportError(f"period {main.label} has no statistics")

    history = tuple((p.label, p.stats) for p in periods[:-1] if p.stats is not None)
    comparison = ()
    if history:
        comparison = comparison_table_rows((*history, (main.label, main.stats)))

    return ReportDocument(
        title=title.strip() if title and title.strip() else default_title(main.label),
        summary=summary.strip() if summary and summary.strip() else default_summary(main.stats, main.label),
        main_label=main.label,
        server_count=main.stats.server_count,
        stats=main.stats,
        history=history,
        server_table=server_table_rows(main.stats),
        comparison_table=comparison,
        insight=analyze_trend(periods),
    )


def write_report_json(document: ReportDocument, path: Path) -> Path:
    """JSON sink: write the report payload to path (parents created)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("report payload written: %s", path)
    return path
