"""Rounding conventions for every quantity kind the engine produces.

One precision per kind, always half-up:

    shares       6 dp    Decimal("850000.000000")
    money        2 dp    Decimal("1234.57")
    price/share  4 dp    Decimal("0.5882")
    percentage   4 dp    Decimal("60.0000")  (0-100 scale)

These helpers never raise for numeric input and always return a Decimal.
Floats are converted through ``str`` so that ``0.1`` rounds as written.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

SHARE_QUANTUM = Decimal("0.000001")
MONEY_QUANTUM = Decimal("0.01")
PRICE_QUANTUM = Decimal("0.0001")
PERCENTAGE_QUANTUM = Decimal("0.0001")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_shares(shares: Number) -> Decimal:
    return to_decimal(shares).quantize(SHARE_QUANTUM, rounding=ROUND_HALF_UP)


def round_money(amount: Number) -> Decimal:
    return to_decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def round_price(price: Number) -> Decimal:
    return to_decimal(price).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def round_percentage(percentage: Number) -> Decimal:
    return to_decimal(percentage).quantize(PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP)


def calculate_percentage(numerator: Number, denominator: Number) -> Decimal:
    """Percentage (0-100 scale) of numerator over denominator.

    Returns zero when the denominator is zero, so an empty cap table reports
    0% for every row instead of raising.

    Example:
        >>> calculate_percentage(3_000_000, 5_000_000)
        Decimal('60.0000')
    """
    denominator = to_decimal(denominator)
    if denominator == 0:
        return round_percentage(ZERO)
    return round_percentage(to_decimal(numerator) / denominator * HUNDRED)


def to_minor_units(amount: Number) -> int:
    """Money amount in cents (half-up)."""
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor_units: int) -> Decimal:
    return round_money(Decimal(minor_units) / 100)
