"""
Parse-or-absent helpers for user-entered text.

These never raise. None means "the user did not enter a usable value",
which is different from an entered zero.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

# ASCII digits only: int() and Decimal() also take "1_000" and non-Latin digits
_INTEGER_RE = re.compile(r'[+-]?[0-9]+')
_DECIMAL_RE = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?')


def parse_quantity(text: Union[str, int, None]) -> Optional[int]:
    """
    Parse a quantity field to an int.

    Returns None for blank, missing or non-integer text ("2.5", "abc").
    Signs are kept, so callers decide what a zero or negative means.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text
    cleaned = str(text).strip()
    if not _INTEGER_RE.fullmatch(cleaned):
        return None
    return int(cleaned)


def parse_decimal(text: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """Parse a rate or price field. Returns None for blank or non-numeric text."""
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, Decimal):
        return text if text.is_finite() else None
    if isinstance(text, (int, float)):
        text = str(text)
    cleaned = str(text).strip()
    if not _DECIMAL_RE.fullmatch(cleaned):
        return None
    try:
        value = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def is_ordered(text: Union[str, int, None]) -> bool:
    """True when a quantity field holds a positive integer."""
    qty = parse_quantity(text)
    return qty is not None and qty > 0
