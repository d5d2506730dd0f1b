#!/usr/bin/env python
"""
Print the pricing trace of a quote built from a stored catalog.

Usage:
    python scripts/debug_quote.py CATALOG_JSON PRODUCT_ID=QTY [...] [--tax 8] [--discount 20]
        [--assign PRODUCT_ID:MULTIPLIER_ID=QTY ...]
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from pricer.config.settings import get_settings
from pricer.engine import Catalog, QuoteBuilder
from pricer.engine.money import format_currency


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Debug a quote build")
    parser.add_argument('catalog', type=Path, help="Catalog JSON file")
    parser.add_argument('quantities', nargs='*', help="PRODUCT_ID=QTY")
    parser.add_argument('--assign', action='append', default=[], help="PRODUCT_ID:MULTIPLIER_ID=QTY")
    parser.add_argument('--tax', default='0')
    parser.add_argument('--discount', default='0')
    return parser.parse_args(argv)


def debug(argv=None):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)

    with open(args.catalog, 'r', encoding='utf-8') as f:
        catalog = Catalog.from_dict(json.load(f))

    print(f"Loaded catalog '{catalog.name}': {len(catalog.products)} products, "
          f"{len(catalog.multipliers)} multipliers")

    quantities = dict(q.split('=', 1) for q in args.quantities)
    assignments = {}
    for entry in args.assign:
        target, qty = entry.split('=', 1)
        product_id, multiplier_id = target.split(':', 1)
        assignments.setdefault(product_id, {})[multiplier_id] = qty

    result = QuoteBuilder(settings).build_result(
        catalog, quantities, assignments,
        tax_rate=args.tax, global_discount_rate=args.discount,
    )

    print("\n--- Build Trace ---")
    print(result.get_trace_text())

    if result.warnings:
        print("\n--- Warnings ---")
        for warning in result.warnings:
            print(f"  {warning}")

    if result.quote is None:
        print("\nNo quote: nothing ordered.")
        return

    print("\n--- Line Traces ---")
    for item in result.quote.items:
        print(item.get_trace_text())
        print()

    totals = result.quote.totals
    symbol = settings.currency_symbol
    print(f"Grand Total: {format_currency(totals.grand_total, symbol, settings.money_places)}")


if __name__ == "__main__":
    debug()
