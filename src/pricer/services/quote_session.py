"""
Quote Session - the calling layer around the engine.

Holds what the user has typed (quantities, multiplier assignments, rates,
customer fields) for the active catalog and rebuilds the quote after every
change. User input is cleaned up here: discount is clamped to 0-100 and tax
to >= 0 before anything reaches the engine, which stays strict.
"""
import logging
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional, Union

from ..config.settings import get_settings, Settings
from ..engine.assignment_resolver import AssignmentResolution, resolve_assignments
from ..engine.models import Catalog, CustomerFields, Multiplier, Product, Quote
from ..engine.money import HUNDRED, ZERO
from ..engine.parsing import parse_decimal, parse_quantity
from ..engine.quote_builder import QuoteBuilder
from ..errors import AssignmentQuantityError, NotFoundError, QuoteValidationError
from .catalog_service import import_products

logger = logging.getLogger(__name__)


class QuoteState(str, Enum):
    """Quote lifecycle. There is no locked state; exports just read a PRICED quote."""
    EMPTY = "EMPTY"
    BUILDING = "BUILDING"
    PRICED = "PRICED"


class QuoteSession:
    """User-facing quote state for one active catalog."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        builder: Optional[QuoteBuilder] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.builder = builder or QuoteBuilder(self.settings)
        self.catalog = catalog or Catalog(
            name=self.settings.default_catalog_name,
            company_name=self.settings.default_company_name,
        )
        self._reset_inputs()

    def _reset_inputs(self):
        self.quantities: dict[str, str] = {}
        self.assignments: dict[str, dict[str, str]] = {}
        self.customer = CustomerFields(company_name=self.catalog.company_name)
        self.tax_rate = ZERO
        self.global_discount_rate = ZERO
        self.current_quote: Optional[Quote] = None
        self.warnings: list[str] = []
        self.state = QuoteState.EMPTY

    # =============================================
    # Quote building
    # =============================================

    def rebuild(self) -> Optional[Quote]:
        """Re-price from the current inputs. The latest rebuild always wins."""
        self.state = QuoteState.BUILDING
        try:
            result = self.builder.build_result(
                catalog=self.catalog,
                quantities=self.quantities,
                assignments=self.assignments,
                existing_quote=self.current_quote,
                customer=self.customer,
                tax_rate=self.tax_rate,
                global_discount_rate=self.global_discount_rate,
            )
        except Exception:
            self.state = QuoteState.PRICED if self.current_quote else QuoteState.EMPTY
            raise

        self.current_quote = result.quote
        self.warnings = list(result.warnings)
        self.state = QuoteState.PRICED if result.quote else QuoteState.EMPTY
        if result.quote is None:
            logger.info("Quote empty")
        else:
            logger.info(
                f"Quote {result.quote.id} built: {len(result.quote.items)} items, "
                f"grand total {result.quote.grand_total}"
            )
        return self.current_quote

    # =============================================
    # Catalog management
    # =============================================

    def load_catalog(self, catalog: Catalog) -> None:
        """Switch catalogs. Everything typed for the old catalog is dropped."""
        self.catalog = catalog
        self._reset_inputs()

    def _require_product(self, product_id: str) -> Product:
        product = self.catalog.product(product_id)
        if product is None:
            raise NotFoundError(f"Product '{product_id}' not found in catalog '{self.catalog.name}'")
        return product

    def add_or_update_product(self, product: Product) -> Product:
        self.catalog = self.catalog.with_product(product)
        self.rebuild()
        return product

    def delete_product(self, product_id: str) -> None:
        self._require_product(product_id)
        self.catalog = self.catalog.without_product(product_id)
        self.quantities.pop(product_id, None)
        self.assignments.pop(product_id, None)
        self.rebuild()

    def import_products(self, products: Iterable[Product]) -> int:
        """Add imported products to the active catalog. Returns how many were added."""
        products = list(products)
        self.catalog = import_products(self.catalog, products)
        logger.info(f"Imported {len(products)} products into '{self.catalog.name}'")
        self.rebuild()
        return len(products)

    def add_or_update_multiplier(self, multiplier: Multiplier) -> Multiplier:
        self.catalog = self.catalog.with_multiplier(multiplier)
        self.rebuild()
        return multiplier

    def delete_multiplier(self, multiplier_id: str) -> None:
        """Delete a multiplier and drop it from every product's assignments."""
        if self.catalog.multiplier(multiplier_id) is None:
            raise NotFoundError(f"Multiplier '{multiplier_id}' not found in catalog '{self.catalog.name}'")
        self.catalog = self.catalog.without_multiplier(multiplier_id)
        self.assignments = {
            pid: {mid: qty for mid, qty in assigns.items() if mid != multiplier_id}
            for pid, assigns in self.assignments.items()
        }
        self.rebuild()

    def add_custom_item(
        self,
        name: str,
        base_price: Union[str, float, int],
        unit_type: str = "unit",
        description: str = "",
        is_discountable: bool = True,
        quantity: int = 1,
    ) -> Product:
        """Add a one-off product (category "Custom") and order it."""
        if not name or not name.strip():
            raise QuoteValidationError("Custom item name is required")
        price = parse_decimal(base_price)
        if price is None:
            raise QuoteValidationError(f"Invalid price for custom item: {base_price!r}")

        product = Product(
            name=name.strip(),
            description=description.strip(),
            unit_type=unit_type.strip() or "unit",
            base_price=price,
            category="Custom",
            is_discountable=is_discountable,
        )
        self.catalog = self.catalog.with_product(product)
        self.quantities[product.id] = str(quantity)
        self.rebuild()
        return product

    def add_voucher(self, name: str, amount: Union[str, float, int], code: Optional[str] = None) -> Product:
        """
        Add a voucher: a product with a negative price that is never discounted.
        """
        if not name or not name.strip():
            raise QuoteValidationError("Voucher description is required")
        value = parse_decimal(amount)
        if value is None or value <= ZERO:
            raise QuoteValidationError(f"Voucher amount must be a positive number, got {amount!r}")

        product = Product(
            name=name.strip(),
            description=f"Code: {code.strip()}" if code and code.strip() else "",
            unit_type="voucher",
            base_price=-value,
            category="Voucher",
            is_discountable=False,
        )
        self.catalog = self.catalog.with_product(product)
        self.quantities[product.id] = "1"
        self.rebuild()
        return product

    # =============================================
    # Quantities and multiplier assignments
    # =============================================

    def update_quantity(self, product_id: str, quantity_text: str) -> Optional[Quote]:
        """
        Store the quantity text for a product and re-price.

        Rejected when an existing multiplier assignment would then cover more
        units than ordered; lower the assignment first.
        """
        self._require_product(product_id)
        qty = parse_quantity(quantity_text)
        if qty is not None and qty > 0:
            for multiplier_id, assigned_text in self.assignments.get(product_id, {}).items():
                assigned = parse_quantity(assigned_text) or 0
                if assigned > qty:
                    raise AssignmentQuantityError(multiplier_id, assigned, qty)

        self.quantities[product_id] = quantity_text
        return self.rebuild()

    def confirm_multiplier_assignment(
        self, product_id: str, assignments: Mapping[str, str]
    ) -> AssignmentResolution:
        """Validate and store a product's multiplier assignments, then re-price."""
        self._require_product(product_id)
        total = parse_quantity(self.quantities.get(product_id)) or 0
        resolution = resolve_assignments(assignments, max(total, 0), self.catalog)

        self.assignments[product_id] = {mid: str(qty) for mid, qty in resolution.quantities.items()}
        logger.debug(f"Stored assignments for {product_id}: {dict(resolution.quantities)}")
        self.rebuild()
        return resolution

    def clear_all(self) -> None:
        """Clear quantities, assignments, customer fields, rates and the quote."""
        logger.info("Clearing all quantities, assignments and customer information")
        self._reset_inputs()

    # =============================================
    # Rates (clamped here, strict in the engine)
    # =============================================

    @staticmethod
    def _parse_rate(rate) -> Decimal:
        value = parse_decimal(rate)
        if value is None:
            raise QuoteValidationError(f"Rate must be a number, got {rate!r}")
        return value

    def set_global_discount(self, rate) -> Optional[Quote]:
        validated = min(max(self._parse_rate(rate), ZERO), HUNDRED)
        if validated == self.global_discount_rate:
            return self.current_quote
        self.global_discount_rate = validated
        logger.debug(f"Global discount rate set to {validated}%")
        return self.rebuild()

    def set_tax_rate(self, rate) -> Optional[Quote]:
        validated = max(self._parse_rate(rate), ZERO)
        if validated == self.tax_rate:
            return self.current_quote
        self.tax_rate = validated
        logger.debug(f"Tax rate set to {validated}%")
        return self.rebuild()

    # =============================================
    # Customer fields and quote edits
    # =============================================

    def update_customer(self, name: str, email: str = "", phone: str = "") -> Optional[Quote]:
        self.customer = CustomerFields(
            customer_name=name,
            customer_email=email,
            customer_phone=phone,
            company_name=self.customer.company_name,
            custom_message=self.customer.custom_message,
        )
        if self.current_quote is not None:
            self.current_quote = self.current_quote.with_customer(name, email, phone)
        return self.current_quote

    def update_quote_details(self, company_name: str, custom_message: str) -> Optional[Quote]:
        self.customer = CustomerFields(
            customer_name=self.customer.customer_name,
            customer_email=self.customer.customer_email,
            customer_phone=self.customer.customer_phone,
            company_name=company_name,
            custom_message=custom_message,
        )
        if self.current_quote is not None:
            self.current_quote = self.current_quote.with_details(company_name, custom_message)
        return self.current_quote

    def remove_quote_item(self, item_id: str) -> Optional[Quote]:
        """
        Remove one line from the quote. The product's quantity and assignments
        are cleared too, so the next rebuild does not bring the line back.
        Removing the last line leaves no quote.
        """
        if self.current_quote is None or self.current_quote.item(item_id) is None:
            raise NotFoundError(f"Quote item '{item_id}' not found")

        product_id = self.current_quote.item(item_id).product.id
        self.quantities.pop(product_id, None)
        self.assignments.pop(product_id, None)
        self.current_quote = self.builder.remove_item(self.current_quote, item_id)
        self.state = QuoteState.PRICED if self.current_quote else QuoteState.EMPTY
        return self.current_quote
