"""Conversion of ledger amounts into the smallest currency unit."""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Any


def to_base_units(value: Any, decimals: int) -> int:
    """Return value as an integer count of the smallest unit.

    JSON numbers are base units whatever their numeric type: 1000000 and
    1000000.0 are the same amount, and a fractional number is rejected.
    Integer strings are base units too. Decimal strings ("1.5") are
    whole-token amounts scaled by 10**decimals, rounding down.

    Raises:
        ValueError: If value is not a number, is a bool, or is a fractional float.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Fractional base-unit amount: {value!r}")
        return int(value)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    try:
        tokens = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not an amount: {value!r}") from e
    if not tokens.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    scaled = (tokens * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR)
    return int(scaled)
