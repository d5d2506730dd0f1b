"""
Quote Item Pricer - prices one product line.

line total = base_price * quantity
           + for each assigned multiplier:
               PERCENTAGE:     base_price * value% * applied_qty
               FIXED_PER_UNIT: value * applied_qty

The base part is discountable when the product is. Each surcharge is
discountable when its own multiplier is, regardless of the product.
"""
from typing import Mapping

from ..errors import AssignmentQuantityError, QuoteValidationError
from .models import MultiplierCatalog, Product, QuoteItem, TraceStep, index_multipliers


def price_item(
    product: Product,
    quantity: int,
    assignments: Mapping[str, int],
    multiplier_catalog: MultiplierCatalog,
) -> QuoteItem:
    """
    Price one product line and snapshot everything it depends on.

    Args:
        product: Catalog product (copied into the item)
        quantity: Ordered units, > 0
        assignments: Resolved multiplier_id -> applied quantity
        multiplier_catalog: Multipliers to snapshot from

    Returns:
        QuoteItem holding copies of the product and applied multipliers

    Raises:
        QuoteValidationError: quantity <= 0, negative or unknown assignment
        AssignmentQuantityError: an assignment covers more units than ordered
    """
    if quantity <= 0:
        raise QuoteValidationError(
            f"Quantity for '{product.name}' must be > 0, got {quantity}; "
            "unordered products are left out of the quote"
        )

    multipliers = index_multipliers(multiplier_catalog)
    for multiplier_id, applied_qty in assignments.items():
        if multiplier_id not in multipliers:
            raise QuoteValidationError(f"Unknown multiplier {multiplier_id} for '{product.name}'")
        if applied_qty < 0:
            raise QuoteValidationError(
                f"Applied quantity for multiplier {multiplier_id} must be >= 0, got {applied_qty}"
            )
        if applied_qty > quantity:
            raise AssignmentQuantityError(multiplier_id, applied_qty, quantity)

    trace = [TraceStep("Product", f"Priced '{product.name}'", product.id)]
    base_total = product.base_price * quantity
    trace.append(TraceStep(
        "Base", f"Quantity {quantity} × ${product.base_price}",
        f"${base_total}" + ("" if product.is_discountable else " (not discountable)"),
    ))

    # Catalog order keeps the line independent of how assignments were entered
    applied = []
    partial = {}
    for multiplier_id, multiplier in multipliers.items():
        applied_qty = assignments.get(multiplier_id, 0)
        if applied_qty <= 0:
            continue
        snapshot = multiplier.snapshot()
        applied.append(snapshot)
        partial[multiplier_id] = applied_qty
        surcharge = snapshot.surcharge(product.base_price, applied_qty)
        trace.append(TraceStep(
            "Multiplier", f"{snapshot.name} on {applied_qty} units",
            f"${surcharge}" + ("" if snapshot.is_discountable else " (not discountable)"),
        ))

    item = QuoteItem(
        product=product,
        quantity=quantity,
        partial_multiplier_quantities=partial,
        applied_multipliers=tuple(applied),
        is_base_item_discountable=product.is_discountable,
        trace=trace,
    )
    trace.append(TraceStep("Line Total", "Before global discount", f"${item.line_total_before_discount}"))
    return item
