from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .aggregated_stats import AggregatedStats
from .trend import TrendInsight

"""ReportDocument: the payload handed to the document-generation sink.

The sink owns layout and serialization; this object only carries the
computed statistics, the pre-formatted table cells and the caller-editable
title/summary strings.
"""

__all__ = [
    "ReportDocument",
]


@dataclass(frozen=True)
class ReportDocument:
    title: str
    summary: str
    main_label: str
    server_count: int
    stats: AggregatedStats
    history: tuple[tuple[str, AggregatedStats], ...] = ()  # (label, stats) 古い順
    server_table: tuple[tuple[str, ...], ...] = ()
    comparison_table: tuple[tuple[str, ...], ...] = ()  # history 無しなら空
    insight: TrendInsight | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe mapping of the document."""
        return {
            "title": self.title,
            "summary": self.summary,
            "main_label": self.main_label,
            "server_count": self.server_count,
            "stats": asdict(self.stats),
            "history": [{"label": label, "stats": asdict(stats)} for label, stats in self.history],
            "server_table": [list(row) for row in self.server_table],
            "comparison_table": [list(row) for row in self.comparison_table],
            "insight": asdict(self.insight) if self.insight is not None else None,
        }
