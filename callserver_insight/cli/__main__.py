from __future__ import annotations

import argparse
import locale
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

from callserver_insight.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ReportConfig, load_config
from callserver_insight.logging.init import log_summary, setup_logging
from callserver_insight.services.orchestrator import ProcessingError, run_report
from callserver_insight.services.report import format_percent, write_report_json
from callserver_insight.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (CALLSERVER_INSIGHT_CONFIG may point at the config file)
- Load and validate the YAML report configuration
- Process every period, aggregate, analyze trends, build the report payload
- Optionally write the payload as JSON, then print the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "CALLSERVER_INSIGHT_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv (existing environment wins by default)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _init_collation(logger: logging.Logger) -> None:
    """Adopt the environment's collation so server ids sort like the user expects."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        # 未インストールのロケール指定時は C 照合順序で続行
        logger.warning(f"locale: {e}; falling back to code point ordering")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Call server utilization report builder")
    p.add_argument("--config", type=Path, default=None, help="Report config YAML path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print normalized rows of each file then exit")
    p.add_argument("--output", type=Path, default=None, help="Write report payload JSON to this path")
    p.add_argument("--title", default=None, help="Report title override")
    p.add_argument("--summary", default=None, help="Executive summary override")
    p.add_argument("--workers", type=int, default=None, help="Parallel file workers")
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _inspect_data(cfg: ReportConfig) -> int:
    from callserver_insight.excel.reader import FileDecodeError, read_rows
    from callserver_insight.services.file_processor import process_rows
    from callserver_insight.services.orchestrator import scan_data_files

    for period_cfg in cfg.periods:
        print(f"PERIOD: {period_cfg.label}")
        try:
            if period_cfg.source_directory is not None:
                paths = scan_data_files(Path(period_cfg.source_directory))
            else:
                paths = [Path(f) for f in period_cfg.files]
        except ProcessingError as e:
            print(f"  scan_error: {e}")
            return EXIT_FATAL
        for path in paths:
            print(f"  FILE: {path.name}")
            try:
                rows = read_rows(path)
            except FileDecodeError as e:
                print(f"    read_error: {e}")
                continue
            columns = sorted({str(k).strip().upper() for r in rows for k in r})
            processed = process_rows(path.name, rows)
            print(f"    cols={columns} server_rows={len(processed.records)}")
            print("    sample_rows=", [asdict(r) for r in processed.records[:3]])
            if processed.file_total_row is not None:
                print("    total_row=", asdict(processed.file_total_row))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()
    _init_collation(logger)

    # None のときのみ sys.argv を読む ([] はテストからの明示的な空引数)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    try:
        cfg = load_config(_config_path(args))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing {len(cfg.periods)} period(s)")
    try:
        result = run_report(
            cfg,
            title=args.title,
            summary=args.summary,
            max_workers=args.workers,
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    for period in result.periods:
        stats = period.stats
        if stats is None:  # pragma: no cover (run_report always attaches stats)
            continue
        logger.info(
            f"{period.label}: servers={stats.server_count} calls={stats.total_calls} "
            f"idle={format_percent(stats.utilization_idle)} "
            f"busy={format_percent(stats.utilization_busy)} "
            f"fault={format_percent(stats.utilization_fault)}"
        )
    if result.comparison is not None:
        c = result.comparison
        logger.info(
            f"compare {c.previous_label} -> {c.current_label}: calls {c.calls_direction} "
            f"by {c.calls_difference}, fault shifted {c.fault_shift_points:.2f} pp"
        )
    if result.insight is not None:
        i = result.insight
        logger.info(
            f"trend: fault utilization {i.direction} by {i.magnitude:.2f}%, "
            f"peak {i.peak_label} at {i.peak_value:.2f}%"
        )

    output = args.output or (Path(cfg.report.output) if cfg.report.output else None)
    if output is not None:
        try:
            write_report_json(result.report, output)
        except OSError as e:
            logger.error(f"output: {e}")
            return EXIT_FATAL

    # log_summary が "SUMMARY " を付けるので先頭を落とす
    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])

    if result.skipped_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
