"""
Data models for the quote pricing engine.

Catalog objects (Product, Multiplier) are copied into quote items when a
quote is built, so a saved quote never changes when the catalog is edited
later. Quote values are frozen; changes go through dataclasses.replace or a
fresh build.
"""
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from ..errors import QuoteValidationError
from .money import ZERO, percent_of, to_decimal
from .totals import QuoteTotals, aggregate, validate_rates


def new_id() -> str:
    return str(uuid.uuid4())


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


class MultiplierType(str, Enum):
    """How a multiplier's value is turned into a surcharge."""
    PERCENTAGE = "PERCENTAGE"          # % of the product's base unit price, per unit
    FIXED_PER_UNIT = "FIXED_PER_UNIT"  # fixed amount per unit


class ProductSortCriteria(str, Enum):
    """Sort orders offered by the catalog view."""
    NAME_ASC = "NAME_ASC"
    NAME_DESC = "NAME_DESC"
    PRICE_ASC = "PRICE_ASC"
    PRICE_DESC = "PRICE_DESC"
    CATEGORY_ASC = "CATEGORY_ASC"
    CATEGORY_DESC = "CATEGORY_DESC"


@dataclass
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


def _trace_text(trace: Iterable[TraceStep], bullet: str) -> str:
    lines = []
    for t in trace:
        if t.value:
            lines.append(f"{bullet} {t.step}: {t.description} = {t.value}")
        else:
            lines.append(f"{bullet} {t.step}: {t.description}")
    return "\n".join(lines)


@dataclass(frozen=True)
class Product:
    """A catalog entry. Vouchers are products with a negative base price."""
    id: str = field(default_factory=new_id)
    name: str = ""
    description: str = ""
    unit_type: str = "unit"
    base_price: Decimal = ZERO
    category: str = "Default"
    is_discountable: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'base_price', to_decimal(self.base_price))

    @property
    def is_voucher(self) -> bool:
        return self.base_price < ZERO

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'unitType': self.unit_type,
            'basePrice': str(self.base_price),
            'category': self.category,
            'isDiscountable': self.is_discountable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Product':
        return cls(
            id=data.get('id') or new_id(),
            name=data.get('name', ''),
            description=data.get('description', ''),
            unit_type=data.get('unitType', 'unit'),
            base_price=to_decimal(data.get('basePrice', 0)),
            category=data.get('category', 'Default'),
            is_discountable=_parse_bool(data.get('isDiscountable', True)),
        )


@dataclass(frozen=True)
class Multiplier:
    """A named, reusable price surcharge defined once per catalog."""
    id: str = field(default_factory=new_id)
    name: str = ""
    type: MultiplierType = MultiplierType.PERCENTAGE
    value: Decimal = ZERO  # 10 means 10% for PERCENTAGE, $10/unit for FIXED_PER_UNIT
    is_discountable: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'type', MultiplierType(self.type))
        value = to_decimal(self.value)
        if value < ZERO:
            raise QuoteValidationError(f"Multiplier '{self.name}' value must be >= 0, got {value}")
        object.__setattr__(self, 'value', value)

    def snapshot(self) -> 'AppliedMultiplier':
        """Copy this definition into a form a quote item can keep."""
        return AppliedMultiplier(
            multiplier_id=self.id,
            name=self.name,
            type=self.type,
            applied_value=self.value,
            is_discountable=self.is_discountable,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'value': str(self.value),
            'isDiscountable': self.is_discountable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Multiplier':
        return cls(
            id=data.get('id') or new_id(),
            name=data.get('name', ''),
            type=MultiplierType(data.get('type', MultiplierType.PERCENTAGE.value)),
            value=to_decimal(data.get('value', 0)),
            is_discountable=_parse_bool(data.get('isDiscountable', True)),
        )


@dataclass(frozen=True)
class AppliedMultiplier:
    """A multiplier as it was when the quote item was built."""
    multiplier_id: str
    name: str
    type: MultiplierType
    applied_value: Decimal
    is_discountable: bool = True

    def surcharge(self, base_price: Decimal, applied_quantity: int) -> Decimal:
        """Surcharge for applied_quantity units of a product priced base_price."""
        if self.type == MultiplierType.PERCENTAGE:
            return percent_of(base_price, self.applied_value) * applied_quantity
        return self.applied_value * applied_quantity


@dataclass(frozen=True)
class SurchargeComponent:
    """One multiplier's contribution to a line total."""
    multiplier_id: str
    name: str
    applied_quantity: int
    amount: Decimal
    is_discountable: bool


@dataclass(frozen=True)
class QuoteItem:
    """
    A priced line of a quote.

    Line total = base_price * quantity + the surcharge of every applied
    multiplier over its own applied quantity. Multipliers are independent:
    two multipliers may each cover every unit of the item.
    """
    product: Product
    quantity: int
    partial_multiplier_quantities: Mapping[str, int] = field(default_factory=dict, hash=False)
    applied_multipliers: tuple[AppliedMultiplier, ...] = ()
    is_base_item_discountable: Optional[bool] = None
    id: str = field(default_factory=new_id)
    trace: list[TraceStep] = field(default_factory=list, compare=False, repr=False)

    def __post_init__(self):
        if self.is_base_item_discountable is None:
            object.__setattr__(self, 'is_base_item_discountable', self.product.is_discountable)
        object.__setattr__(
            self, 'partial_multiplier_quantities',
            MappingProxyType(dict(self.partial_multiplier_quantities))
        )
        object.__setattr__(self, 'applied_multipliers', tuple(self.applied_multipliers))

    @property
    def base_total(self) -> Decimal:
        return self.product.base_price * self.quantity

    @property
    def surcharge_components(self) -> tuple[SurchargeComponent, ...]:
        components = []
        for applied in self.applied_multipliers:
            qty = self.partial_multiplier_quantities.get(applied.multiplier_id, 0)
            if qty <= 0:
                continue
            components.append(SurchargeComponent(
                multiplier_id=applied.multiplier_id,
                name=applied.name,
                applied_quantity=qty,
                amount=applied.surcharge(self.product.base_price, qty),
                is_discountable=applied.is_discountable,
            ))
        return tuple(components)

    @property
    def multiplier_adjustment(self) -> Decimal:
        return sum((c.amount for c in self.surcharge_components), ZERO)

    @property
    def line_total_before_discount(self) -> Decimal:
        return self.base_total + self.multiplier_adjustment

    @property
    def discountable_amount(self) -> Decimal:
        """Part of the line total the global discount applies to."""
        amount = self.base_total if self.is_base_item_discountable else ZERO
        for component in self.surcharge_components:
            if component.is_discountable:
                amount += component.amount
        return amount

    def discount_amount(self, global_discount_rate) -> Decimal:
        rate = to_decimal(global_discount_rate)
        if rate <= ZERO:
            return ZERO
        return percent_of(self.discountable_amount, rate)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        return _trace_text(self.trace, "→")


@dataclass(frozen=True)
class CustomerFields:
    """Customer and cover-letter fields typed in before a quote exists."""
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    company_name: str = ""
    custom_message: str = ""


@dataclass(frozen=True)
class Quote:
    """
    A priced quote snapshot.

    Totals are derived from the items on access and are never stored, so
    exports and previews always read the same numbers.
    """
    id: str = field(default_factory=new_id)
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    company_name: str = ""
    custom_message: str = ""
    items: tuple[QuoteItem, ...] = ()
    tax_rate: Decimal = ZERO
    global_discount_rate: Decimal = ZERO

    def __post_init__(self):
        tax, discount = validate_rates(self.tax_rate, self.global_discount_rate)
        object.__setattr__(self, 'tax_rate', tax)
        object.__setattr__(self, 'global_discount_rate', discount)
        object.__setattr__(self, 'items', tuple(self.items))

    @cached_property
    def totals(self) -> QuoteTotals:
        return aggregate(self.items, self.tax_rate, self.global_discount_rate)

    @property
    def subtotal_before_discount(self) -> Decimal:
        return self.totals.subtotal_before_discount

    @property
    def discountable_subtotal(self) -> Decimal:
        return self.totals.discountable_subtotal

    @property
    def total_discount_amount(self) -> Decimal:
        return self.totals.total_discount_amount

    @property
    def subtotal_after_discount(self) -> Decimal:
        return self.totals.subtotal_after_discount

    @property
    def tax_amount(self) -> Decimal:
        return self.totals.tax_amount

    @property
    def grand_total(self) -> Decimal:
        return self.totals.grand_total

    @property
    def customer(self) -> CustomerFields:
        return CustomerFields(
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            company_name=self.company_name,
            custom_message=self.custom_message,
        )

    def item(self, item_id: str) -> Optional[QuoteItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def with_customer(self, name: str, email: str, phone: str) -> 'Quote':
        return replace(self, customer_name=name, customer_email=email, customer_phone=phone)

    def with_details(self, company_name: str, custom_message: str) -> 'Quote':
        return replace(self, company_name=company_name, custom_message=custom_message)

    def without_item(self, item_id: str) -> 'Quote':
        """Copy without the given item. May leave an empty quote; see QuoteBuilder.remove_item."""
        return replace(self, items=tuple(i for i in self.items if i.id != item_id))


@dataclass(frozen=True)
class Catalog:
    """Products and multiplier definitions with id lookups."""
    id: str = field(default_factory=new_id)
    name: str = "Default Catalog"
    company_name: str = ""
    products: tuple[Product, ...] = ()
    multipliers: tuple[Multiplier, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'products', tuple(self.products))
        object.__setattr__(self, 'multipliers', tuple(self.multipliers))

    @cached_property
    def products_by_id(self) -> Mapping[str, Product]:
        return MappingProxyType({p.id: p for p in self.products})

    @cached_property
    def multipliers_by_id(self) -> Mapping[str, Multiplier]:
        return MappingProxyType({m.id: m for m in self.multipliers})

    def product(self, product_id: str) -> Optional[Product]:
        return self.products_by_id.get(product_id)

    def multiplier(self, multiplier_id: str) -> Optional[Multiplier]:
        return self.multipliers_by_id.get(multiplier_id)

    def with_product(self, product: Product) -> 'Catalog':
        """Add the product, or replace the one with the same id in place."""
        if product.id in self.products_by_id:
            products = tuple(product if p.id == product.id else p for p in self.products)
        else:
            products = self.products + (product,)
        return replace(self, products=products)

    def without_product(self, product_id: str) -> 'Catalog':
        return replace(self, products=tuple(p for p in self.products if p.id != product_id))

    def with_multiplier(self, multiplier: Multiplier) -> 'Catalog':
        if multiplier.id in self.multipliers_by_id:
            multipliers = tuple(multiplier if m.id == multiplier.id else m for m in self.multipliers)
        else:
            multipliers = self.multipliers + (multiplier,)
        return replace(self, multipliers=multipliers)

    def without_multiplier(self, multiplier_id: str) -> 'Catalog':
        return replace(self, multipliers=tuple(m for m in self.multipliers if m.id != multiplier_id))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'companyName': self.company_name,
            'products': [p.to_dict() for p in self.products],
            'multipliers': [m.to_dict() for m in self.multipliers],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Catalog':
        return cls(
            id=data.get('id') or new_id(),
            name=data.get('name', 'Default Catalog'),
            company_name=data.get('companyName', ''),
            products=[Product.from_dict(p) for p in data.get('products', [])],
            multipliers=[Multiplier.from_dict(m) for m in data.get('multipliers', [])],
        )


MultiplierCatalog = Union[Catalog, Mapping[str, Multiplier], Iterable[Multiplier]]


def index_multipliers(multipliers: MultiplierCatalog) -> Mapping[str, Multiplier]:
    """Return an id -> Multiplier lookup in catalog order."""
    if isinstance(multipliers, Catalog):
        return multipliers.multipliers_by_id
    if isinstance(multipliers, Mapping):
        return multipliers
    return {m.id: m for m in multipliers}


@dataclass
class BuildResult:
    """Complete result of a quote build, with trace and warnings."""
    quote: Optional[Quote] = None
    skipped_product_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the build-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a build-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable build trace as formatted text."""
        return _trace_text(self.trace, "•")
