from __future__ import annotations

import json
import locale
import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

from callserver_insight.cli.__main__ import main as cli_main

REPO_ROOT = Path(__file__).resolve().parents[2]


def _seed_periods(temp_workdir: Path, make_usage_xlsx) -> None:
    make_usage_xlsx(temp_workdir / "data" / "may" / "a.xlsx", [["2025-05-01", "10.0.0.1", 90, 0, 10, 100]])
    make_usage_xlsx(temp_workdir / "data" / "june" / "a.xlsx", [["2025-06-01", "10.0.0.1", 80, 0, 20, 100]])


def test_cli_success(write_config, temp_workdir: Path, make_usage_xlsx, capsys):
    _seed_periods(temp_workdir, make_usage_xlsx)
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Processing 2 period(s)" in out
    assert "INFO May 2025: servers=1 calls=100 idle=90.00% busy=0.00% fault=10.00%" in out
    assert "calls increased by 0, fault shifted 10.00 pp" in out
    assert "trend: fault utilization increased by 10.00%, peak June 2025 at 20.00%" in out
    assert (
        "SUMMARY periods=2 files=2/2 skipped=0 servers=1 calls=100 "
        "idle_pct=80.00 busy_pct=0.00 fault_pct=20.00"
    ) in out


def test_cli_config_missing(temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found:" in out


def test_cli_config_from_env_var(temp_workdir: Path, make_usage_xlsx, monkeypatch, capsys):
    make_usage_xlsx(temp_workdir / "data" / "a.xlsx", [["d", "s1", 1, 0, 0, 1]])
    alt = temp_workdir / "alt.yml"
    alt.write_text("periods:\n  - month: May\n    year: 2025\n    source_directory: ./data\n", encoding="utf-8")
    monkeypatch.setenv("CALLSERVER_INSIGHT_CONFIG", str(alt))
    assert cli_main([]) == 0
    assert "SUMMARY periods=1 files=1/1" in capsys.readouterr().out


def test_cli_config_from_dotenv(temp_workdir: Path, make_usage_xlsx, capsys):
    make_usage_xlsx(temp_workdir / "data" / "a.xlsx", [["d", "s1", 1, 0, 0, 1]])
    (temp_workdir / "dotenv.yml").write_text(
        "periods:\n  - month: May\n    year: 2025\n    source_directory: ./data\n", encoding="utf-8"
    )
    (temp_workdir / ".env").write_text("CALLSERVER_INSIGHT_CONFIG=dotenv.yml\n", encoding="utf-8")
    try:
        assert cli_main([]) == 0
    finally:
        # load_dotenv は os.environ に直接書き込むので後始末
        os.environ.pop("CALLSERVER_INSIGHT_CONFIG", None)
    assert "SUMMARY periods=1" in capsys.readouterr().out


def test_cli_directory_missing(write_config, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "may").rmdir()
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR processing: Directory not found:" in out


def test_cli_no_usable_data(write_config, temp_workdir: Path, make_usage_xlsx, capsys):
    make_usage_xlsx(temp_workdir / "data" / "may" / "a.xlsx", [[None, "  ", 1, 1, 1, 3]])
    make_usage_xlsx(temp_workdir / "data" / "june" / "a.xlsx", [["d", "s1", 1, 1, 1, 3]])
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR processing: period May 2025: No valid data rows or TOTAL rows found" in out
    assert "SUMMARY" not in out


def test_cli_output_and_title_override(write_config, temp_workdir: Path, make_usage_xlsx, capsys):
    _seed_periods(temp_workdir, make_usage_xlsx)
    out_path = temp_workdir / "out" / "report.json"
    code = cli_main(["--output", str(out_path), "--title", "Ops review", "--workers", "2"])
    assert code == 0
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data["title"] == "Ops review"
    assert data["main_label"] == "June 2025"
    assert data["comparison_table"][0] == ["METRIC", "May 2025", "June 2025"]


def test_cli_debug_mode(write_config, temp_workdir: Path, make_usage_xlsx, capsys):
    _seed_periods(temp_workdir, make_usage_xlsx)
    code = cli_main(["--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG file=a.xlsx server_rows=1" in out


def test_cli_inspect_data(write_config, temp_workdir: Path, make_usage_xlsx, capsys):
    _seed_periods(temp_workdir, make_usage_xlsx)
    (temp_workdir / "data" / "june" / "broken.xlsx").write_bytes(b"garbage")
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "PERIOD: May 2025" in out
    assert "FILE: a.xlsx" in out
    assert "cols=['BUSY', 'DATE', 'FAULT', 'IDLE', 'SERVER', 'TOTAL'] server_rows=1" in out
    assert "read_error:" in out
    # inspect は集計しない
    assert "SUMMARY" not in out


def test_cli_adopts_environment_collation(write_config, temp_workdir: Path, make_usage_xlsx):
    _seed_periods(temp_workdir, make_usage_xlsx)
    with patch("callserver_insight.cli.__main__.locale.setlocale") as setlocale:
        assert cli_main([]) == 0
    setlocale.assert_called_once_with(locale.LC_COLLATE, "")


def test_cli_unsupported_locale_falls_back(write_config, temp_workdir: Path, make_usage_xlsx, capsys):
    _seed_periods(temp_workdir, make_usage_xlsx)
    with patch(
        "callserver_insight.cli.__main__.locale.setlocale",
        side_effect=locale.Error("unsupported locale setting"),
    ):
        code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "WARN locale: unsupported locale setting; falling back to code point ordering" in out
    assert "SUMMARY periods=2" in out


def test_cli_runs_as_module_without_runpy_warning():
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-W", "default", "-m", "callserver_insight.cli", "--help"],
        cwd=REPO_ROOT,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0, result.stderr
    assert "usage:" in result.stdout
    assert "found in sys.modules" not in result.stderr
    # パッケージ import 時に __main__ を読み込まない
    assert (REPO_ROOT / "callserver_insight" / "cli" / "__init__.py").read_text(encoding="utf-8") == ""
