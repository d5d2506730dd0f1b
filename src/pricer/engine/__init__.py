"""Engine subpackage - quote pricing logic."""
from .assignment_resolver import AssignmentResolution, resolve_assignments
from .item_pricer import price_item
from .models import (
    AppliedMultiplier, BuildResult, Catalog, CustomerFields, Multiplier,
    MultiplierType, Product, ProductSortCriteria, Quote, QuoteItem,
)
from .quote_builder import QuoteBuilder
from .totals import QuoteTotals, aggregate

__all__ = [
    'AppliedMultiplier', 'AssignmentResolution', 'BuildResult', 'Catalog',
    'CustomerFields', 'Multiplier', 'MultiplierType', 'Product',
    'ProductSortCriteria', 'Quote', 'QuoteBuilder', 'QuoteItem', 'QuoteTotals',
    'aggregate', 'price_item', 'resolve_assignments',
]
