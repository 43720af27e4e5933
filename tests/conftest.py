# Shared pytest fixtures
from __future__ import annotations
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from callserver_insight.logging.init import reset_logging

USAGE_COLUMNS = ["DATE", "SERVER", "IDLE", "BUSY", "FAULT", "TOTAL"]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # StreamHandler は作成時の sys.stdout を掴むのでテスト毎に作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("CALLSERVER_INSIGHT_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """periods:
  - month: May
    year: 2025
    source_directory: ./data/may
  - month: June
    year: 2025
    source_directory: ./data/june
report:
  title: ""
max_workers: 1
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "report.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    (temp_workdir / "data" / "may").mkdir()
    (temp_workdir / "data" / "june").mkdir()
    return cfg


def write_usage_xlsx(path: Path, rows: list[list[Any]], columns: list[str] | None = None) -> Path:
    """Write rows under a single header line into the first sheet of path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df = pd.DataFrame(rows, columns=columns or USAGE_COLUMNS)
        df.to_excel(writer, sheet_name="Usage", index=False)
    return path


def write_usage_csv(path: Path, rows: list[list[Any]], columns: list[str] | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=columns or USAGE_COLUMNS).to_csv(path, index=False)
    return path


@pytest.fixture()
def make_usage_xlsx() -> Callable[..., Path]:
    return write_usage_xlsx


@pytest.fixture()
def make_usage_csv() -> Callable[..., Path]:
    return write_usage_csv
