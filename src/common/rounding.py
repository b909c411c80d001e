"""Numeric helpers shared by the store and the scorer."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up.

    Python's round() uses banker's rounding (round(8.5) == 8); stored risk
    values and scores are defined with halves rounding towards +inf.
    """
    return math.floor(value + 0.5)


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into the closed range [low, high]."""
    return max(low, min(high, value))
