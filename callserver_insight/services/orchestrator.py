from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import PeriodConfig, ReportConfig
from ..excel.reader import SUPPORTED_SUFFIXES
from ..logging.error_log import ErrorLogBuffer
from ..models.comparison_period import ComparisonPeriod
from ..models.processing_result import PeriodResult, RunResult
from .aggregator import NoUsableDataError, aggregate
from .file_processor import process_files
from .progress import ProgressTracker
from .report import ReportError, build_report
from .trend import compare_periods

logger = logging.getLogger(__name__)

"""Service orchestration for multi-period usage reports.

For every configured period, in configured order:
1. Resolve its files (explicit list, or a non-recursive directory scan)
2. Decode + normalize each file independently (map step, optionally threaded)
3. Aggregate the processed files (reduce step)
Then derive the pairwise comparison (exactly two periods), the trend insight
(two or more) and the report payload for the last period.

A file that fails to decode is skipped with a warning. A period without any
usable data aborts the whole run: no statistics are produced from nothing.
"""


class ProcessingError(Exception):
    """Fatal error for a run (bad input location, no usable data, ...)."""
    pass


def scan_data_files(directory: Path) -> list[Path]:
    """Scan directory for supported data files (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(
            (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES),
            key=lambda p: p.name,
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _resolve_files(period_cfg: PeriodConfig) -> list[Path]:
    if period_cfg.source_directory is not None:
        files = scan_data_files(Path(period_cfg.source_directory))
    else:
        files = [Path(f) for f in period_cfg.files]
    if not files:
        raise ProcessingError(f"no data files for period {period_cfg.label}")
    return files


def run_period(
    period_cfg: PeriodConfig,
    *,
    max_workers: int | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> PeriodResult:
    """Process and aggregate the files of one period.

    Raises:
        ProcessingError: the period has no files or no usable data
    """
    files = _resolve_files(period_cfg)
    period = ComparisonPeriod.create(
        period_cfg.month, period_cfg.year, files, period_id=period_cfg.id
    )
    logger.info("period=%s files=%d", period.label, len(files))

    with ProgressTracker(len(files), description=f"Processing {period.label}") as progress:
        batch = process_files(
            files,
            period_label=period.label,
            max_workers=max_workers,
            progress=progress,
        )
    if error_log is not None:
        error_log.extend(batch.warnings)

    try:
        stats = aggregate(batch.files)
    except NoUsableDataError as e:
        raise ProcessingError(f"period {period.label}: {e}") from e

    logger.info(
        "period=%s servers=%d calls=%d skipped_files=%d",
        period.label,
        stats.server_count,
        stats.total_calls,
        batch.skipped_files,
    )
    return PeriodResult(period=period.with_stats(stats), batch=batch)


def run_report(
    config: ReportConfig,
    *,
    title: str | None = None,
    summary: str | None = None,
    max_workers: int | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run every configured period and build the report for the last one.

    Args:
        config: Report configuration (periods in chronological order)
        title: Report title override (falls back to config, then default)
        summary: Executive summary override (falls back to config, then default)
        max_workers: Thread pool size override for per-file processing
        error_log: Warning log buffer; a fresh one is used when None

    Returns:
        RunResult with per-period stats, comparison/trend insight and report

    Raises:
        ProcessingError: For fatal errors that prevent a trustworthy report
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    workers = max_workers if max_workers is not None else config.max_workers

    period_results: list[PeriodResult] = []
    warning_log: Path | None = None
    try:
        for period_cfg in config.periods:
            period_results.append(run_period(period_cfg, max_workers=workers, error_log=error_log))
    finally:
        try:
            warning_log = error_log.flush()
        except OSError as e:
            logger.warning("failed to write warning log: %s", e)

    periods = [r.period for r in period_results]

    comparison = None
    if len(periods) == 2:
        previous, current = periods
        comparison = compare_periods(
            previous.stats,  # type: ignore[arg-type]
            current.stats,  # type: ignore[arg-type]
            previous_label=previous.label,
            current_label=current.label,
        )

    try:
        report = build_report(
            periods,
            title=title if title is not None else config.report.title,
            summary=summary if summary is not None else config.report.summary,
        )
    except ReportError as e:
        raise ProcessingError(f"report: {e}") from e

    elapsed = (datetime.now(UTC) - start_time).total_seconds()
    return RunResult(
        period_results=tuple(period_results),
        report=report,
        comparison=comparison,
        insight=report.insight,
        elapsed_seconds=elapsed,
        warning_log=warning_log,
    )
