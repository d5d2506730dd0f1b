"""
Quote Totals Aggregator - folds priced line items into quote totals.

Order of operations is fixed:
1. subtotal_before_discount = sum of line totals
2. discountable_subtotal    = sum of each line's discountable amount
3. total_discount_amount    = discountable_subtotal * discount%
4. subtotal_after_discount  = subtotal_before_discount - total_discount_amount
5. tax_amount               = subtotal_after_discount * tax%
6. grand_total              = subtotal_after_discount + tax_amount

Tax is always charged on the discounted amount. Nothing is rounded here.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from ..errors import QuoteValidationError
from .money import ZERO, HUNDRED, Number, percent_of, quantize_money, to_decimal

if TYPE_CHECKING:
    from .models import QuoteItem


@dataclass(frozen=True)
class QuoteTotals:
    """Derived totals of a quote. Values are exact Decimals."""
    subtotal_before_discount: Decimal = ZERO
    discountable_subtotal: Decimal = ZERO
    total_discount_amount: Decimal = ZERO
    subtotal_after_discount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    grand_total: Decimal = ZERO

    def rounded(self, places: int = 2) -> 'QuoteTotals':
        """Copy with every amount rounded for display."""
        return QuoteTotals(**{
            name: quantize_money(value, places)
            for name, value in asdict(self).items()
        })

    def to_dict(self) -> dict:
        return asdict(self)


def validate_rates(tax_rate: Number, global_discount_rate: Number) -> tuple[Decimal, Decimal]:
    """
    Convert and check quote rates.

    The engine is strict: a negative tax rate or a discount outside 0-100
    is a caller bug and raises instead of being clamped.
    """
    try:
        tax = to_decimal(tax_rate)
        discount = to_decimal(global_discount_rate)
    except (ArithmeticError, TypeError, ValueError):
        raise QuoteValidationError(
            f"Rates must be numeric (tax={tax_rate!r}, discount={global_discount_rate!r})"
        )

    if not tax.is_finite() or tax < ZERO:
        raise QuoteValidationError(f"Tax rate must be >= 0, got {tax_rate}")
    if not discount.is_finite() or discount < ZERO or discount > HUNDRED:
        raise QuoteValidationError(
            f"Global discount rate must be between 0 and 100, got {global_discount_rate}"
        )
    return tax, discount


def aggregate(items: Iterable['QuoteItem'], tax_rate: Number, global_discount_rate: Number) -> QuoteTotals:
    """
    Sum line items into quote totals.

    Args:
        items: Priced quote items
        tax_rate: Tax percentage, >= 0
        global_discount_rate: Discount percentage, 0-100

    Returns:
        QuoteTotals with exact (unrounded) amounts
    """
    tax, discount = validate_rates(tax_rate, global_discount_rate)

    subtotal = ZERO
    discountable = ZERO
    for item in items:
        subtotal += item.line_total_before_discount
        discountable += item.discountable_amount

    discount_amount = percent_of(discountable, discount) if discount > ZERO else ZERO
    after_discount = subtotal - discount_amount
    tax_amount = percent_of(after_discount, tax)

    return QuoteTotals(
        subtotal_before_discount=subtotal,
        discountable_subtotal=discountable,
        total_discount_amount=discount_amount,
        subtotal_after_discount=after_discount,
        tax_amount=tax_amount,
        grand_total=after_discount + tax_amount,
    )
