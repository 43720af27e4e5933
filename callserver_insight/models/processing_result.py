from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .comparison_period import ComparisonPeriod
from .file_warning import FileWarning
from .processed_file import ProcessedFile
from .report_document import ReportDocument
from .trend import PeriodComparison, TrendInsight

"""Processing result models.

BatchResult is the output of the per-file map step for one period,
PeriodResult pairs it with the period it belongs to and RunResult is the
outcome of a complete multi-period run.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for BatchResult)."""
    file_name: str  # ファイル名
    status: str  # processed/skipped
    server_rows: int  # 保持されたサーバ行数
    has_total_row: bool
    elapsed_seconds: float  # ファイル処理時間


@dataclass(frozen=True)
class BatchResult:
    """Processed files of one batch, in input order, plus skipped-file warnings."""
    files: tuple[ProcessedFile, ...]
    warnings: tuple[FileWarning, ...] = ()
    file_stats: tuple[FileStat, ...] = ()

    @property
    def skipped_files(self) -> int:
        return len(self.warnings)


@dataclass(frozen=True)
class PeriodResult:
    period: ComparisonPeriod  # stats 付与済み
    batch: BatchResult


@dataclass(frozen=True)
class RunResult:
    """Outcome of a complete run over all configured periods."""
    period_results: tuple[PeriodResult, ...]
    report: ReportDocument
    comparison: PeriodComparison | None = None  # ちょうど 2 期間の場合のみ
    insight: TrendInsight | None = None  # 2 期間以上
    elapsed_seconds: float = 0.0
    warning_log: Path | None = None

    @property
    def periods(self) -> tuple[ComparisonPeriod, ...]:
        return tuple(r.period for r in self.period_results)

    @property
    def warnings(self) -> tuple[FileWarning, ...]:
        return tuple(w for r in self.period_results for w in r.batch.warnings)

    @property
    def processed_files(self) -> int:
        return sum(len(r.batch.files) for r in self.period_results)

    @property
    def skipped_files(self) -> int:
        return sum(r.batch.skipped_files for r in self.period_results)

    @property
    def total_files(self) -> int:
        return self.processed_files + self.skipped_files
