from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

"""Rounding helpers shared by the aggregator, trend analyzer and report.

Both helpers round halves upward instead of Python's round-half-even, so
2.5 -> 3 and 0.125 -> 0.13.
"""

__all__ = [
    "round_half_up",
    "round_percent",
]

_CENTS = Decimal("0.01")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    # value + 0.5 は 0.49999999999999994 などで桁上がりするため差で判定
    floor = math.floor(value)
    return floor + (1 if value - floor >= 0.5 else 0)


def round_percent(value: float) -> float:
    """Round a percentage to two decimal places for display."""
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))
