"""
Quote Builder - turns catalog + quantities + assignments into a Quote.

Build pipeline:
1. Snapshot the quantity and assignment maps for this call
2. For each catalog product (catalog order) whose quantity parses to > 0:
   resolve its multiplier assignments, then price the line
3. No priced lines -> no quote (None)
4. Otherwise build a Quote, keeping the id and customer fields of the
   previous quote when there is one

Builds are pure: the same inputs always give the same totals.
"""
from typing import Mapping, Optional

from ..config.settings import get_settings, Settings
from .assignment_resolver import resolve_assignments
from .item_pricer import price_item
from .models import BuildResult, Catalog, CustomerFields, Quote, new_id
from .money import Number
from .parsing import parse_quantity
from .totals import validate_rates


class QuoteBuilder:
    """
    Builds immutable Quote snapshots from the current catalog state.

    A None result means "nothing ordered": callers go back to the catalog
    view instead of treating it as an error.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def build(
        self,
        catalog: Catalog,
        quantities: Mapping[str, str],
        assignments: Optional[Mapping[str, Mapping[str, str]]] = None,
        existing_quote: Optional[Quote] = None,
        customer: Optional[CustomerFields] = None,
        tax_rate: Number = 0,
        global_discount_rate: Number = 0,
    ) -> Optional[Quote]:
        """
        Build a quote (or None when nothing is ordered).

        Args:
            catalog: Active catalog (products and multipliers)
            quantities: product_id -> quantity as entered
            assignments: product_id -> {multiplier_id -> quantity as entered}
            existing_quote: Previous quote whose id and customer fields are kept
            customer: Draft customer fields used when there is no previous quote
            tax_rate: Tax percentage, >= 0
            global_discount_rate: Discount percentage, 0-100

        Returns:
            Quote, or None when no product has a positive quantity
        """
        return self.build_result(
            catalog, quantities, assignments, existing_quote, customer,
            tax_rate, global_discount_rate,
        ).quote

    def build_result(
        self,
        catalog: Catalog,
        quantities: Mapping[str, str],
        assignments: Optional[Mapping[str, Mapping[str, str]]] = None,
        existing_quote: Optional[Quote] = None,
        customer: Optional[CustomerFields] = None,
        tax_rate: Number = 0,
        global_discount_rate: Number = 0,
    ) -> BuildResult:
        """Build a quote with full traceability. Same arguments as build()."""
        tax, discount = validate_rates(tax_rate, global_discount_rate)

        # Fresh snapshots; caller state is never read again or mutated
        quantities = dict(quantities or {})
        assignments = {pid: dict(a) for pid, a in (assignments or {}).items()}

        result = BuildResult()
        result.add_trace("Catalog", f"Building from '{catalog.name}'", f"{len(catalog.products)} products")

        items = []
        for product in catalog.products:
            qty = parse_quantity(quantities.get(product.id))
            if qty is None or qty <= 0:
                if product.id in quantities:
                    result.skipped_product_ids.append(product.id)
                continue

            resolution = resolve_assignments(assignments.get(product.id, {}), qty, catalog)
            for warning in resolution.warnings:
                result.add_warning(f"{product.name}: {warning}")

            item = price_item(product, qty, resolution.quantities, catalog)
            items.append(item)
            result.add_trace("Line", f"{product.name} × {qty}", f"${item.line_total_before_discount}")

        if not items:
            result.add_trace("Result", "No products ordered, no quote")
            return result

        draft = customer or CustomerFields()
        if existing_quote is not None:
            quote = Quote(
                id=existing_quote.id,
                customer_name=existing_quote.customer_name,
                customer_email=existing_quote.customer_email,
                customer_phone=existing_quote.customer_phone,
                company_name=existing_quote.company_name,
                custom_message=existing_quote.custom_message,
                items=tuple(items),
                tax_rate=tax,
                global_discount_rate=discount,
            )
        else:
            quote = Quote(
                id=new_id(),
                customer_name=draft.customer_name,
                customer_email=draft.customer_email,
                customer_phone=draft.customer_phone,
                company_name=(
                    draft.company_name or catalog.company_name or self.settings.default_company_name
                ),
                custom_message=draft.custom_message,
                items=tuple(items),
                tax_rate=tax,
                global_discount_rate=discount,
            )

        result.quote = quote
        result.add_trace("Subtotal", "Before discount", f"${quote.subtotal_before_discount}")
        result.add_trace("Discount", f"{discount}% of ${quote.discountable_subtotal}", f"${quote.total_discount_amount}")
        result.add_trace("Tax", f"{tax}% of ${quote.subtotal_after_discount}", f"${quote.tax_amount}")
        result.add_trace("Grand Total", f"{len(items)} items", f"${quote.grand_total}")
        return result

    @staticmethod
    def remove_item(quote: Optional[Quote], item_id: str) -> Optional[Quote]:
        """Drop one item. A quote left with no items collapses to None."""
        if quote is None:
            return None
        remaining = quote.without_item(item_id)
        return remaining if remaining.items else None
