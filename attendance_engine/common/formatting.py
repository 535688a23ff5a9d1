"""Percentage helpers shared by the quota card and the attendance summary."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def percentage(part: int, whole: int) -> int:
    """``part`` as a whole-number percentage of ``whole``, halves rounded up.

    Returns 0 when ``whole`` is 0.
    """
    if whole == 0:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_percentage(value: int) -> str:
    return f"{value}%"
