from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Report configuration loader.

Responsibilities:
- Load the YAML report configuration (default: config/report.yml)
- Validate it against the packaged JSON schema (report_schema.json)
- Apply defaults (max_workers=1, no title/summary override, no output file)

The resulting ReportConfig is owned by the caller and passed explicitly into
the orchestration entry points; nothing here keeps module-level state.
"""

SCHEMA_PATH = Path(__file__).with_name("report_schema.json")
DEFAULT_CONFIG_PATH = Path("config/report.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class PeriodConfig:
    """One reporting period: label plus where its files come from."""
    month: str
    year: str
    source_directory: str | None = None  # files と排他
    files: tuple[str, ...] = ()
    id: str | None = None

    @property
    def label(self) -> str:
        return f"{self.month} {self.year}"


@dataclass(frozen=True)
class ReportOptions:
    title: str | None = None
    summary: str | None = None
    output: str | None = None  # JSON payload の出力先


@dataclass(frozen=True)
class ReportConfig:
    periods: tuple[PeriodConfig, ...]  # 時系列順 (最後が current)
    report: ReportOptions
    max_workers: int = 1


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: the schema file is missing/invalid, or the data fails
            validation (missing keys, wrong types, unknown keys, ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _period_from_raw(raw: dict[str, Any]) -> PeriodConfig:
    return PeriodConfig(
        month=raw["month"],
        year=str(raw["year"]),
        source_directory=raw.get("source_directory"),
        files=tuple(raw.get("files", ())),
        id=raw.get("id"),
    )


def load_config(path: Path) -> ReportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top-level mapping expected")

    _validate_config_schema(data)

    report_raw = data.get("report", {})
    return ReportConfig(
        periods=tuple(_period_from_raw(p) for p in data["periods"]),
        report=ReportOptions(
            title=report_raw.get("title"),
            summary=report_raw.get("summary"),
            output=report_raw.get("output"),
        ),
        max_workers=data.get("max_workers", 1),
    )
