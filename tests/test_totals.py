from decimal import Decimal

import pytest

from pricer.engine import Product, QuoteTotals, aggregate, price_item
from pricer.errors import QuoteValidationError


def test_discount_before_tax(deck, catalog):
    """$100 × 2 with 10% rush on both units, 20% discount, 8% tax."""
    item = price_item(deck, 2, {"rush": 2}, catalog)
    totals = aggregate([item], tax_rate=8, global_discount_rate=20)

    assert totals.subtotal_before_discount == Decimal("220")
    assert totals.discountable_subtotal == Decimal("220")
    assert totals.total_discount_amount == Decimal("44")
    assert totals.subtotal_after_discount == Decimal("176")
    assert totals.tax_amount == Decimal("14.08")
    assert totals.grand_total == Decimal("190.08")


def test_voucher_is_never_discounted(catalog):
    voucher = Product(id="v", name="Voucher", base_price=Decimal("-50"), is_discountable=False)
    item = price_item(voucher, 1, {}, catalog)
    totals = aggregate([item], tax_rate=0, global_discount_rate=20)

    assert totals.subtotal_before_discount == Decimal("-50")
    assert totals.discountable_subtotal == Decimal("0")
    assert totals.total_discount_amount == Decimal("0")
    assert totals.grand_total == Decimal("-50")


def test_non_discountable_lines_excluded_from_discount(deck, permit, catalog):
    items = [price_item(deck, 1, {}, catalog), price_item(permit, 1, {}, catalog)]
    totals = aggregate(items, tax_rate=0, global_discount_rate=50)

    assert totals.subtotal_before_discount == Decimal("175")
    assert totals.discountable_subtotal == Decimal("100")
    assert totals.total_discount_amount == Decimal("50")
    assert totals.grand_total == Decimal("125")


def test_no_items_gives_zero_totals():
    assert aggregate([], tax_rate=8, global_discount_rate=10) == QuoteTotals()


def test_amounts_stay_exact_until_rounded(catalog):
    product = Product(id="p", name="Washer", base_price=Decimal("0.10"))
    item = price_item(product, 3, {}, catalog)
    totals = aggregate([item], tax_rate=Decimal("7.5"), global_discount_rate=0)

    assert totals.tax_amount == Decimal("0.0225")
    assert totals.grand_total == Decimal("0.3225")
    assert totals.rounded().grand_total == Decimal("0.32")
    assert totals.rounded().tax_amount == Decimal("0.02")


def test_many_lines_sum_exactly(catalog):
    products = [
        Product(id=f"p{n}", name=f"Part {n}", base_price=Decimal("19.99") + Decimal(n) / 100)
        for n in range(50)
    ]
    items = [price_item(p, n + 1, {}, catalog) for n, p in enumerate(products)]
    totals = aggregate(items, tax_rate=0, global_discount_rate=0)

    expected = sum(
        ((Decimal("19.99") + Decimal(n) / 100) * (n + 1) for n in range(50)),
        Decimal(0),
    )
    assert totals.subtotal_before_discount == expected
    assert totals.grand_total == sum((i.line_total_before_discount for i in items), Decimal(0))


def test_grand_total_falls_as_discount_rises(deck, permit, catalog):
    items = [price_item(deck, 3, {"rush": 1}, catalog), price_item(permit, 1, {}, catalog)]
    grand_totals = [aggregate(items, 8, rate).grand_total for rate in range(0, 101, 10)]
    assert grand_totals == sorted(grand_totals, reverse=True)


def test_grand_total_rises_with_tax(deck, catalog):
    items = [price_item(deck, 3, {"stain": 2}, catalog)]
    grand_totals = [aggregate(items, rate, 15).grand_total for rate in range(0, 30, 3)]
    assert grand_totals == sorted(grand_totals)


def test_full_discount_leaves_only_non_discountable(deck, permit, catalog):
    items = [price_item(deck, 2, {}, catalog), price_item(permit, 1, {}, catalog)]
    totals = aggregate(items, 0, 100)
    assert totals.subtotal_after_discount == Decimal("75")


@pytest.mark.parametrize("tax,discount", [
    (-1, 0),
    (0, -0.01),
    (0, 101),
    ("abc", 0),
])
def test_out_of_range_rates_raise(deck, catalog, tax, discount):
    item = price_item(deck, 1, {}, catalog)
    with pytest.raises(QuoteValidationError):
        aggregate([item], tax, discount)


def test_totals_to_dict(deck, catalog):
    totals = aggregate([price_item(deck, 1, {}, catalog)], 0, 0)
    data = totals.to_dict()
    assert set(data) == {
        "subtotal_before_discount", "discountable_subtotal", "total_discount_amount",
        "subtotal_after_discount", "tax_amount", "grand_total",
    }
    assert data["grand_total"] == Decimal("100")
