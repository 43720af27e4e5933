from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..excel.reader import FileDecodeError, read_rows
from ..models.file_warning import FileWarning
from ..models.processed_file import ProcessedFile
from ..models.processing_result import BatchResult, FileStat
from ..models.server_record import ServerRecord
from .normalizer import RowKind, normalize_row
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""File processor: the per-file "map" step.

Each file is decoded and normalized independently of every other file, so a
batch can be fanned out over a thread pool. Results are always returned in
the input order; the aggregator relies on nothing else.

A file that cannot be decoded is skipped with a FileWarning. It never aborts
the batch.
"""

__all__ = [
    "process_rows",
    "process_file",
    "process_files",
]

WARNING_DECODE = "FILE_DECODE_ERROR"


def process_rows(file_name: str, rows: Iterable[Mapping[Any, Any]]) -> ProcessedFile:
    """Normalize one file's raw rows into a ProcessedFile.

    Server rows are kept in encounter order. When several total rows are
    present the last one encountered wins (overwrite, not merge).
    """
    records: list[ServerRecord] = []
    total_row: ServerRecord | None = None
    discarded = 0
    for row in rows:
        normalized = normalize_row(row)
        if normalized.kind is RowKind.SERVER:
            records.append(normalized.record)  # type: ignore[arg-type]
        elif normalized.kind is RowKind.TOTAL:
            if total_row is not None:
                logger.debug("file=%s multiple TOTAL rows, keeping the last one", file_name)
            total_row = normalized.record
        else:
            discarded += 1
    logger.debug(
        "file=%s server_rows=%d total_row=%s discarded=%d",
        file_name,
        len(records),
        total_row is not None,
        discarded,
    )
    return ProcessedFile(file_name=file_name, records=tuple(records), file_total_row=total_row)


def process_file(path: Path) -> ProcessedFile:
    """Decode and normalize a single file.

    Raises:
        FileDecodeError: the file could not be decoded
    """
    return process_rows(path.name, read_rows(path))


def _timed_process(path: Path) -> tuple[ProcessedFile, float]:
    start = datetime.now(UTC)
    processed = process_file(path)
    return processed, (datetime.now(UTC) - start).total_seconds()


def _skip(path: Path, period_label: str, error: Exception) -> FileWarning:
    logger.warning("skipped file %s: %s", path.name, error)
    return FileWarning.create(
        period=period_label,
        file=path.name,
        warning_type=WARNING_DECODE,
        message=str(error),
    )


def process_files(
    paths: Sequence[Path],
    *,
    period_label: str = "",
    max_workers: int | None = None,
    progress: ProgressTracker | None = None,
) -> BatchResult:
    """Process a batch of files, optionally in parallel.

    Args:
        paths: Files in caller order
        period_label: Label used on skipped-file warnings
        max_workers: Thread pool size; None or 1 processes sequentially
        progress: Optional progress tracker updated per file

    Returns:
        BatchResult with processed files in input order and one warning per
        skipped file
    """
    outcomes: dict[int, tuple[ProcessedFile, float] | FileWarning] = {}

    if max_workers is None or max_workers <= 1 or len(paths) <= 1:
        for idx, path in enumerate(paths):
            if progress is not None:
                progress.start_file(path)
            try:
                outcomes[idx] = _timed_process(path)
            except FileDecodeError as e:
                outcomes[idx] = _skip(path, period_label, e)
            if progress is not None:
                progress.finish_file(success=not isinstance(outcomes[idx], FileWarning))
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            future_to_idx: dict[Future[tuple[ProcessedFile, float]], int] = {
                pool.submit(_timed_process, path): idx for idx, path in enumerate(paths)
            }
            for fut in as_completed(future_to_idx):
                idx = future_to_idx[fut]
                path = paths[idx]
                if progress is not None:
                    progress.start_file(path)
                try:
                    outcomes[idx] = fut.result()
                except FileDecodeError as e:
                    outcomes[idx] = _skip(path, period_label, e)
                if progress is not None:
                    progress.finish_file(success=not isinstance(outcomes[idx], FileWarning))

    # 完了順ではなく入力順で組み立てる
    files: list[ProcessedFile] = []
    warnings: list[FileWarning] = []
    stats: list[FileStat] = []
    for idx, path in enumerate(paths):
        outcome = outcomes[idx]
        if isinstance(outcome, FileWarning):
            warnings.append(outcome)
            stats.append(FileStat(path.name, "skipped", 0, False, 0.0))
            continue
        processed, elapsed = outcome
        files.append(processed)
        stats.append(
            FileStat(
                file_name=path.name,
                status="processed",
                server_rows=len(processed.records),
                has_total_row=processed.file_total_row is not None,
                elapsed_seconds=elapsed,
            )
        )

    return BatchResult(files=tuple(files), warnings=tuple(warnings), file_stats=tuple(stats))
