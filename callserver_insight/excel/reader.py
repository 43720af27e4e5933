from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

"""Spreadsheet decoding into raw rows.

The first sheet's first row is the header; every following non-blank line
becomes one raw row (column name -> value). Nothing here interprets the
content: column matching, coercion and classification belong to
services.normalizer.

.xlsx is read through openpyxl; .xls/.ods need the xlrd/odf engines that
pandas looks up at runtime, and .csv goes through pandas.read_csv.
"""

__all__ = [
    "FileDecodeError",
    "SUPPORTED_SUFFIXES",
    "read_sheet",
    "frame_to_rows",
    "read_rows",
]

SUPPORTED_SUFFIXES = (".xlsx", ".xls", ".ods", ".csv")


class FileDecodeError(Exception):
    """Raised when a file cannot be decoded (corrupt, unsupported, unreadable)."""


def read_sheet(path: Path) -> pd.DataFrame:
    """Read the first sheet (or the CSV body) of a file as a DataFrame.

    "NA" / "NULL" 等の文字列は NaN 化しない (サーバ名として有効な値のため)。
    空セルのみ NaN になる。
    """
    na_values = [""]
    keep_default_na = False
    if path.suffix.lower() == ".csv":
        try:
            return pd.read_csv(path, keep_default_na=keep_default_na, na_values=na_values)
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
    return pd.read_excel(
        path, sheet_name=0, header=0, keep_default_na=keep_default_na, na_values=na_values
    )


def _cell_value(val: Any) -> Any:
    if val is None:
        return None
    if isinstance(val, str):
        return None if val.strip() == "" else val
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):  # pragma: no cover (array-like cell)
        return val
    if isinstance(val, pd.Timestamp):
        return val.to_pydatetime()
    if hasattr(val, "item"):
        # numpy scalar -> python scalar
        return val.item()
    return val


def frame_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a decoded frame into raw rows, skipping fully blank lines."""
    columns = [str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        row_dict = {col: _cell_value(val) for col, val in zip(columns, raw, strict=False)}
        if all(v is None for v in row_dict.values()):
            continue
        rows.append(row_dict)
    return rows


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Decode a file into its ordered raw rows.

    Raises
    ------
    FileDecodeError: the file is missing, corrupt or in an unsupported format
    """
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise FileDecodeError(f"unsupported file type: {path.name}")
    if not path.is_file():
        raise FileDecodeError(f"file not found: {path}")
    try:
        df = read_sheet(path)
    except Exception as e:
        # pandas / engine 側の例外型は多岐に渡るためファイル単位で包む
        raise FileDecodeError(f"failed to decode {path.name}: {e}") from e
    return frame_to_rows(df)
