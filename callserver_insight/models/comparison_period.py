from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from pathlib import Path

from .aggregated_stats import AggregatedStats

"""ComparisonPeriod model.

A labeled (month, year) reporting interval with the files selected for it and,
once aggregated, its own AggregatedStats. Sequences of periods are ordered by
the caller (chronological); the last element is the "current" period.
"""

__all__ = [
    "ComparisonPeriod",
]


@dataclass(frozen=True)
class ComparisonPeriod:
    id: str
    month: str
    year: str
    files: tuple[Path, ...] = ()
    stats: AggregatedStats | None = None

    @classmethod
    def create(
        cls,
        month: str,
        year: str | int,
        files: tuple[Path, ...] | list[Path] = (),
        *,
        period_id: str | None = None,
    ) -> ComparisonPeriod:
        """Create a period, generating a random id when none is given."""
        return cls(
            id=period_id or uuid.uuid4().hex,
            month=month,
            year=str(year),
            files=tuple(files),
        )

    @property
    def label(self) -> str:
        return f"{self.month} {self.year}"

    def with_stats(self, stats: AggregatedStats) -> ComparisonPeriod:
        """Return a copy holding the given stats (periods are never mutated)."""
        return replace(self, stats=stats)
