"""
Quote Export - tabular views of a priced quote.

Reads Quote.items and the quote totals only; nothing here recomputes a
total. Amounts are rounded for presentation at this point and no earlier.
"""
import io
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.models import Quote
from ..engine.money import format_percentage, negate, quantize_money

LINE_COLUMNS = [
    'Product', 'Description', 'Unit', 'Quantity', 'Unit Price',
    'Base Total', 'Multipliers', 'Adjustments', 'Line Total', 'Discountable',
]


def quote_lines_frame(quote: Quote, places: int = 2) -> pd.DataFrame:
    """One row per quote item."""
    rows = []
    for item in quote.items:
        multipliers = "; ".join(
            f"{c.name} × {c.applied_quantity}" for c in item.surcharge_components
        )
        rows.append({
            'Product': item.product.name,
            'Description': item.product.description,
            'Unit': item.product.unit_type,
            'Quantity': item.quantity,
            'Unit Price': quantize_money(item.product.base_price, places),
            'Base Total': quantize_money(item.base_total, places),
            'Multipliers': multipliers,
            'Adjustments': quantize_money(item.multiplier_adjustment, places),
            'Line Total': quantize_money(item.line_total_before_discount, places),
            'Discountable': quantize_money(item.discountable_amount, places),
        })
    return pd.DataFrame(rows, columns=LINE_COLUMNS)


def quote_totals_frame(quote: Quote, places: int = 2) -> pd.DataFrame:
    """Summary rows: subtotal, discount, tax, grand total."""
    totals = quote.totals.rounded(places)
    rows = [
        ('Subtotal', totals.subtotal_before_discount),
        (f"Discount ({format_percentage(quote.global_discount_rate)})", negate(totals.total_discount_amount)),
        ('Subtotal After Discount', totals.subtotal_after_discount),
        (f"Tax ({format_percentage(quote.tax_rate)})", totals.tax_amount),
        ('Grand Total', totals.grand_total),
    ]
    return pd.DataFrame(rows, columns=['Label', 'Amount'])


def export_quote_csv(quote: Quote, places: int = 2) -> str:
    """CSV text of the quote lines followed by the totals."""
    buffer = io.StringIO()
    quote_lines_frame(quote, places).to_csv(buffer, index=False)
    buffer.write("\n")
    quote_totals_frame(quote, places).to_csv(buffer, index=False)
    return buffer.getvalue()


def export_quote_excel(quote: Quote, path: Path, places: int = 2) -> Path:
    """Write a workbook with a Lines sheet, a Totals sheet and a Customer sheet."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    customer = pd.DataFrame([
        ('Quote', quote.id),
        ('Customer', quote.customer_name),
        ('Email', quote.customer_email),
        ('Phone', quote.customer_phone),
        ('Company', quote.company_name),
        ('Message', quote.custom_message),
    ], columns=['Field', 'Value'])

    # openpyxl stores Decimals as numbers; floats keep the workbook readable elsewhere
    lines = quote_lines_frame(quote, places)
    for col in ('Unit Price', 'Base Total', 'Adjustments', 'Line Total', 'Discountable'):
        lines[col] = lines[col].astype(float)
    totals = quote_totals_frame(quote, places)
    totals['Amount'] = totals['Amount'].astype(float)

    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        lines.to_excel(writer, sheet_name='Lines', index=False)
        totals.to_excel(writer, sheet_name='Totals', index=False)
        customer.to_excel(writer, sheet_name='Customer', index=False)
    return path


def default_export_name(quote: Quote, extension: str = 'csv', prefix: Optional[str] = None) -> str:
    """File name like 'Quote_Jane_Doe_1a2b3c4d.csv'."""
    who = (quote.customer_name or 'Customer').strip().replace(' ', '_')
    return f"{prefix or 'Quote'}_{who}_{quote.id[:8]}.{extension}"
