from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import numpy as np
import pytest

from callserver_insight.services.normalizer import (
    RowKind,
    coerce_number,
    coerce_text,
    normalize_keys,
    normalize_row,
    select_fields,
)


def test_column_names_are_trimmed_and_case_insensitive():
    """" Idle ", "IDLE" and "idle" all address the IDLE field."""
    for key in (" Idle ", "IDLE", "idle", "iDlE\t"):
        result = normalize_row({"server": "10.0.0.1", key: 7})
        assert result.kind is RowKind.SERVER
        assert result.record is not None
        assert result.record.idle == 7


def test_normalize_keys_later_column_wins():
    assert normalize_keys({"Idle": 1, " IDLE ": 2}) == {"IDLE": 2}


def test_unrecognized_columns_are_ignored():
    result = normalize_row({"SERVER": "s1", "IDLE": 1, "REGION": "eu", "NOTES": "x"})
    assert result.kind is RowKind.SERVER
    rec = result.record
    assert rec is not None
    assert (rec.idle, rec.busy, rec.fault, rec.total) == (1, 0, 0, 0)


def test_select_fields_keeps_only_recognized_columns():
    fields = select_fields({" idle ": 1, "Region": "eu", "server": "s1", "Notes": None})
    assert fields == {"IDLE": 1, "SERVER": "s1"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("1,000", 0),
        ("0x10", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        ("inf", 0),
        ("nan", 0),
        (" 42 ", 42),
        ("3.5", 3.5),
        ("1e3", 1000),
        (12, 12),
        (12.0, 12),
        (np.int64(9), 9),
        (np.float64(2.25), 2.25),
        (Decimal("4"), 4),
        (True, 1),
        ([1, 2], 0),
    ],
)
def test_coerce_number_never_fails(raw, expected):
    assert coerce_number(raw) == expected


def test_coerce_number_integral_float_is_int():
    assert isinstance(coerce_number(100.0), int)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ""),
        ("  10.0.0.1  ", "10.0.0.1"),
        (0, ""),
        (float("nan"), ""),
        (2025, "2025"),
        (101.0, "101"),
        (datetime(2025, 5, 1), "2025-05-01"),
        (datetime(2025, 5, 1, 8, 30), "2025-05-01T08:30:00"),
        (date(2025, 5, 2), "2025-05-02"),
    ],
)
def test_coerce_text(raw, expected):
    assert coerce_text(raw) == expected


def test_blank_server_and_date_is_discarded():
    result = normalize_row({"SERVER": "  ", "DATE": None, "IDLE": 5})
    assert result.kind is RowKind.DISCARD
    assert result.record is None


def test_row_with_only_date_is_discarded():
    result = normalize_row({"DATE": "2025-05-01", "IDLE": 5})
    assert result.kind is RowKind.DISCARD


@pytest.mark.parametrize(
    "row",
    [
        {"DATE": "TOTAL", "SERVER": None, "IDLE": 10},
        {"DATE": "Grand total", "SERVER": "", "IDLE": 10},
        {"DATE": "2025-05-01", "SERVER": "total", "IDLE": 10},
        # サーバ名があっても TOTAL 判定が優先
        {"DATE": "Total", "SERVER": "10.0.0.1", "IDLE": 10},
    ],
)
def test_total_rows_are_identified(row):
    result = normalize_row(row)
    assert result.kind is RowKind.TOTAL
    assert result.record is not None
    assert result.record.idle == 10


def test_all_zero_server_row_is_retained():
    result = normalize_row({"SERVER": "10.0.0.9", "IDLE": 0, "BUSY": None, "FAULT": "n/a"})
    assert result.kind is RowKind.SERVER
    rec = result.record
    assert rec is not None
    assert rec.server_ip == "10.0.0.9"
    assert rec.component_sum == 0


def test_server_row_fields_are_populated():
    result = normalize_row(
        {"Date": datetime(2025, 5, 1), "Server": " 10.0.0.1 ", "Idle": 100, "Busy": "50", "Fault": 10.0, "Total": 160}
    )
    rec = result.record
    assert rec is not None
    assert rec.date == "2025-05-01"
    assert rec.server_ip == "10.0.0.1"
    assert (rec.idle, rec.busy, rec.fault, rec.total) == (100, 50, 10, 160)
