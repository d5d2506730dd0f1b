"""
Money helpers.

All engine arithmetic is done on Decimal values and is never rounded.
Rounding happens only here, at presentation time.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number to Decimal without picking up binary float noise.

    Floats go through str() so 0.1 becomes Decimal('0.1'), not
    Decimal('0.1000000000000000055511151231257827...').
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(str(value).strip())


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Return rate% of amount (rate 10 means 10%)."""
    return amount * (rate / HUNDRED)


def quantize_money(value: Number, places: int = 2) -> Decimal:
    """Round half-up to a fixed number of places for display or export."""
    exp = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exp, rounding=ROUND_HALF_UP)


def format_currency(value: Number, symbol: str = "$", places: int = 2) -> str:
    """
    Format an amount for display.

    Example: Decimal('1234.5') -> "$1,234.50", Decimal('-50') -> "-$50.00"
    """
    amount = quantize_money(value, places)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{places}f}"


def format_percentage(value: Number, places: int = 2) -> str:
    """Format a rate for display. Example: 12.5 -> "12.50%"."""
    return f"{quantize_money(value, places):.{places}f}%"


def negate(value: Decimal) -> Decimal:
    """Negative of value, leaving zero as 0 instead of -0."""
    return -value if value else value
