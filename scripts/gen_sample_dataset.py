#!/usr/bin/env python3
"""Sample dataset generation script for call server usage reports.

Generates synthetic usage exports in the layout the report builder reads:
- Row 1: Header row (DATE, SERVER, IDLE, BUSY, FAULT, TOTAL)
- Row 2+: One row per server per day
- Last row: TOTAL row carrying the file level sums

One file is produced per day, so a directory of output files can be used as the
source_directory of a period.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

COLUMNS = ["DATE", "SERVER", "IDLE", "BUSY", "FAULT", "TOTAL"]


def generate_usage_frame(
    day: pd.Timestamp,
    servers: list[str],
    rng: np.random.Generator,
    fault_rate: float = 0.05,
) -> pd.DataFrame:
    """Generate one day of per-server usage counts plus a trailing TOTAL row.

    Args:
        day: Date written into the DATE column
        servers: Server identifiers (one row each)
        rng: Random generator (seeded by the caller for reproducibility)
        fault_rate: Expected share of calls ending in FAULT

    Returns:
        DataFrame with COLUMNS as headers
    """
    rows: list[dict[str, Any]] = []
    for server in servers:
        calls = int(rng.integers(200, 2000))
        fault = int(rng.binomial(calls, fault_rate))
        busy = int(rng.binomial(calls - fault, 0.35))
        idle = calls - fault - busy
        rows.append(
            {
                "DATE": day.strftime("%Y-%m-%d"),
                "SERVER": server,
                "IDLE": idle,
                "BUSY": busy,
                "FAULT": fault,
                "TOTAL": calls,
            }
        )

    df = pd.DataFrame(rows, columns=COLUMNS)
    total_row = {
        "DATE": "TOTAL",
        "SERVER": "",
        "IDLE": int(df["IDLE"].sum()),
        "BUSY": int(df["BUSY"].sum()),
        "FAULT": int(df["FAULT"].sum()),
        "TOTAL": int(df["TOTAL"].sum()),
    }
    return pd.concat([df, pd.DataFrame([total_row], columns=COLUMNS)], ignore_index=True)


def create_period_files(
    output_dir: Path,
    year: int,
    month: int,
    days: int,
    servers: int,
    fmt: str = "xlsx",
    fault_rate: float = 0.05,
    seed: int = 42,
) -> list[Path]:
    """Write one usage file per day of the given month into output_dir."""
    rng = np.random.default_rng(seed)
    server_ids = [f"10.0.0.{i}" for i in range(1, servers + 1)]
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for day in pd.date_range(pd.Timestamp(year=year, month=month, day=1), periods=days, freq="D"):
        df = generate_usage_frame(day, server_ids, rng, fault_rate)
        path = output_dir / f"usage-{day.strftime('%Y%m%d')}.{fmt}"
        if fmt == "csv":
            df.to_csv(path, index=False)
        else:
            with pd.ExcelWriter(path, engine="openpyxl") as writer:
                df.to_excel(writer, sheet_name="Usage", index=False)
        written.append(path)

    print(f"Created {len(written)} file(s) in {output_dir}")
    print(f"  Servers per file: {servers}")
    print(f"  Fault rate: {fault_rate:.2%}")
    return written


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic call server usage files for one period",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One week of May 2025 with 4 servers
  %(prog)s data/2025-05 --year 2025 --month 5 --days 7 --servers 4

  # CSV output with a higher fault rate
  %(prog)s data/2025-06 --year 2025 --month 6 --format csv --fault-rate 0.12
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory for generated files")
    parser.add_argument("--year", type=int, required=True, help="Period year")
    parser.add_argument("--month", type=int, required=True, help="Period month (1-12)")
    parser.add_argument("--days", type=int, default=7, help="Number of daily files (default: 7)")
    parser.add_argument("--servers", type=int, default=4, help="Servers per file (default: 4)")
    parser.add_argument("--format", choices=["xlsx", "csv"], default="xlsx", help="Output format")
    parser.add_argument("--fault-rate", type=float, default=0.05, help="Fault share (default: 0.05)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if not 1 <= args.month <= 12:
        print("Error: --month must be between 1 and 12", file=sys.stderr)
        return 1
    if args.days <= 0 or args.servers <= 0:
        print("Error: --days and --servers must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.fault_rate <= 1.0:
        print("Error: --fault-rate must be between 0 and 1", file=sys.stderr)
        return 1

    try:
        create_period_files(
            args.output_dir,
            args.year,
            args.month,
            args.days,
            args.servers,
            args.format,
            args.fault_rate,
            args.seed,
        )
        return 0
    except (OSError, ValueError) as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
