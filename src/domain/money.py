"""Monetary arithmetic helpers

All amounts are ``Decimal`` quantized to cents. Floats are never accepted
as an arithmetic operand; they are converted through ``str`` first so the
decimal value matches what was written, not its binary approximation.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyLike = Union[Decimal, int, str, float]


def quantize_money(value: MoneyLike) -> Decimal:
    """Round a value half-up to whole cents"""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to integer cents (e.g. for the card processor)"""
    return int(quantize_money(amount) * 100)


def from_minor_units(minor: int) -> Decimal:
    """Convert integer cents back to a quantized Decimal amount"""
    return quantize_money(Decimal(minor) / 100)
