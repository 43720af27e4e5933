from __future__ import annotations

import math
import numbers
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from ..models.server_record import Number, ServerRecord

"""Row normalizer: raw spreadsheet row -> ServerRecord or discard.

Rules:
- Column names are trimmed and upper-cased before lookup, so " Idle ", "IDLE"
  and "idle" all address the IDLE field. Unknown columns are ignored.
- Metric cells never fail: missing / non-numeric / non-finite values become 0.
- A row whose SERVER and DATE are both blank is discarded.
- A row whose SERVER or DATE contains "TOTAL" (any case) is a total row, even
  when it also names a server.
- Any other row with a non-blank SERVER is a server row, including rows where
  every metric is zero. Rows without a SERVER are dropped.
"""

__all__ = [
    "RECOGNIZED_FIELDS",
    "TOTAL_MARKER",
    "RowKind",
    "NormalizedRow",
    "normalize_keys",
    "select_fields",
    "coerce_number",
    "coerce_text",
    "normalize_row",
]

RECOGNIZED_FIELDS = ("DATE", "SERVER", "IDLE", "BUSY", "FAULT", "TOTAL")
TOTAL_MARKER = "TOTAL"

# 桁区切り・16進・アンダースコア等は受け付けない (float() より厳しめ)
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


class RowKind(Enum):
    """Classification of a normalized row.

    - SERVER: retained per-server record
    - TOTAL: file-level total line, surfaced separately
    - DISCARD: blank or unattributable row
    """
    SERVER = "server"
    TOTAL = "total"
    DISCARD = "discard"


@dataclass(frozen=True)
class NormalizedRow:
    kind: RowKind
    record: ServerRecord | None = None  # DISCARD のときは None


def normalize_keys(row: Mapping[Any, Any]) -> dict[str, Any]:
    """Upper-case and trim every key; a later column wins on collision."""
    return {str(key).strip().upper(): value for key, value in row.items()}


def select_fields(row: Mapping[Any, Any]) -> dict[str, Any]:
    """Normalized keys restricted to RECOGNIZED_FIELDS (other columns are ignored)."""
    return {key: value for key, value in normalize_keys(row).items() if key in RECOGNIZED_FIELDS}


def _finite_or_zero(number: float) -> Number:
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def coerce_number(value: Any) -> Number:
    """Coerce a loosely typed cell to a finite number (0 when not numeric)."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, (numbers.Real, Decimal)):
        return _finite_or_zero(float(value))
    if isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_RE.match(text):
            return 0
        return _finite_or_zero(float(text))
    return 0


def coerce_text(value: Any) -> str:
    """Coerce a loosely typed cell to trimmed text ("" for blank/falsy cells)."""
    if value is None or value is False:
        return ""
    if value is True:
        return "true"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number) or number == 0:
            return ""
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return str(value)
    return str(value).strip()


def normalize_row(row: Mapping[Any, Any]) -> NormalizedRow:
    """Classify one raw row and build its ServerRecord."""
    fields = select_fields(row)
    server = coerce_text(fields.get("SERVER"))
    row_date = coerce_text(fields.get("DATE"))

    if not server and not row_date:
        return NormalizedRow(RowKind.DISCARD)

    record = ServerRecord(
        date=row_date,
        server_ip=server,
        idle=coerce_number(fields.get("IDLE")),
        busy=coerce_number(fields.get("BUSY")),
        fault=coerce_number(fields.get("FAULT")),
        total=coerce_number(fields.get("TOTAL")),
    )

    if TOTAL_MARKER in server.upper() or TOTAL_MARKER in row_date.upper():
        return NormalizedRow(RowKind.TOTAL, record)
    if server:
        return NormalizedRow(RowKind.SERVER, record)
    # DATE だけの行: 帰属先サーバが無いので破棄
    return NormalizedRow(RowKind.DISCARD)
