import io
from decimal import Decimal

import pandas as pd
import pytest

from pricer.data.quote_export import (
    LINE_COLUMNS, default_export_name, export_quote_csv, export_quote_excel,
    quote_lines_frame, quote_totals_frame,
)
from pricer.engine import CustomerFields


@pytest.fixture
def quote(builder, catalog):
    return builder.build(
        catalog,
        {"deck": "2", "permit": "1"},
        {"deck": {"rush": "2", "stain": "1"}},
        customer=CustomerFields(customer_name="Jane Doe", customer_email="jane@example.com"),
        tax_rate=8,
        global_discount_rate=20,
    )


def test_lines_frame(quote):
    df = quote_lines_frame(quote)

    assert list(df.columns) == LINE_COLUMNS
    assert list(df['Product']) == ["Deck Board", "Permit Fee"]
    deck_row = df.iloc[0]
    assert deck_row['Quantity'] == 2
    assert deck_row['Multipliers'] == "Rush × 2; Stain × 1"
    assert deck_row['Adjustments'] == Decimal("25.00")
    assert deck_row['Line Total'] == Decimal("225.00")
    assert df.iloc[1]['Discountable'] == Decimal("0.00")


def test_totals_frame_reads_quote_totals(quote):
    df = quote_totals_frame(quote)
    amounts = dict(zip(df['Label'], df['Amount']))

    # 300 subtotal, 20% of 225, 8% of 255
    assert amounts['Subtotal'] == Decimal("300.00")
    assert amounts['Discount (20.00%)'] == Decimal("-45.00")
    assert amounts['Subtotal After Discount'] == Decimal("255.00")
    assert amounts['Tax (8.00%)'] == Decimal("20.40")
    assert amounts['Grand Total'] == Decimal("275.40")
    assert quote.grand_total == Decimal("275.40")


def test_zero_discount_row_is_not_negative_zero(builder, catalog):
    quote = builder.build(catalog, {"deck": "1"})
    df = quote_totals_frame(quote)
    assert str(df.iloc[1]['Amount']) == "0.00"


def test_export_csv(quote):
    text = export_quote_csv(quote)

    lines = pd.read_csv(io.StringIO(text.split("\n\n")[0]))
    assert len(lines) == 2
    assert "Grand Total,275.40" in text
    assert "Discount (20.00%),-45.00" in text


def test_export_excel(tmp_path, quote):
    path = export_quote_excel(quote, tmp_path / "exports" / "quote.xlsx")
    assert path.exists()

    sheets = pd.read_excel(path, sheet_name=None)
    assert set(sheets) == {"Lines", "Totals", "Customer"}
    assert len(sheets["Lines"]) == 2
    totals = dict(zip(sheets["Totals"]["Label"], sheets["Totals"]["Amount"]))
    assert totals["Grand Total"] == pytest.approx(275.40)
    customer = dict(zip(sheets["Customer"]["Field"], sheets["Customer"]["Value"]))
    assert customer["Customer"] == "Jane Doe"


def test_default_export_name(quote):
    name = default_export_name(quote)
    assert name == f"Quote_Jane_Doe_{quote.id[:8]}.csv"
    assert default_export_name(quote, "xlsx", prefix="Estimate").startswith("Estimate_Jane_Doe_")
