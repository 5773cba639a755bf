"""Half-up rounding shared by every pipeline stage."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round ``value`` to ``ndigits`` decimals, halves away from zero.

    Python's ``round`` uses banker's rounding (``round(2.5) == 2``); nutrition
    values are displayed with the usual half-up convention instead.

    Example:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(0.25, 1)
        0.3
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_int(value: float) -> int:
    """Round half-up to the nearest integer."""
    return int(round_half_up(value, 0))


def round_to_tenth(value: float) -> float:
    """Round half-up to one decimal place."""
    return round_half_up(value, 1)
