"""
Half-up rounding for user-facing percentages and rupee amounts.

Python's round() uses banker's rounding (round(2.5) == 2). Allocation
percentages and amount suggestions are shown to users who expect 2.5 -> 3,
so they go through round_half_up instead.
"""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ndigits, ties away from zero."""
    factor = 10 ** ndigits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value) if value else 0.0


def round_half_up_int(value: float) -> int:
    """Half-up rounding to a whole number."""
    return int(round_half_up(value))
