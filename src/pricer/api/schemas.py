"""
Pydantic request/response models for the API.

Amounts are Decimals and serialize as strings, so no float rounding is
introduced on the way out.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..engine.models import (
    Catalog, CustomerFields, Multiplier, MultiplierType, Product, Quote, QuoteItem, new_id,
)


class ProductIn(BaseModel):
    id: Optional[str] = None
    name: str
    description: str = ""
    unit_type: str = "unit"
    base_price: Decimal
    category: str = "Default"
    is_discountable: bool = True

    @classmethod
    def from_model(cls, p: Product) -> 'ProductIn':
        return cls(
            id=p.id, name=p.name, description=p.description, unit_type=p.unit_type,
            base_price=p.base_price, category=p.category, is_discountable=p.is_discountable,
        )

    def to_model(self) -> Product:
        return Product(
            id=self.id or new_id(),
            name=self.name,
            description=self.description,
            unit_type=self.unit_type,
            base_price=self.base_price,
            category=self.category,
            is_discountable=self.is_discountable,
        )


class MultiplierIn(BaseModel):
    id: Optional[str] = None
    name: str
    type: MultiplierType = MultiplierType.PERCENTAGE
    value: Decimal = Field(ge=0)
    is_discountable: bool = True

    def to_model(self) -> Multiplier:
        return Multiplier(
            id=self.id or new_id(),
            name=self.name,
            type=self.type,
            value=self.value,
            is_discountable=self.is_discountable,
        )


class CatalogIn(BaseModel):
    id: Optional[str] = None
    name: str = "Default Catalog"
    company_name: str = ""
    products: List[ProductIn] = []
    multipliers: List[MultiplierIn] = []

    def to_model(self) -> Catalog:
        return Catalog(
            id=self.id or new_id(),
            name=self.name,
            company_name=self.company_name,
            products=[p.to_model() for p in self.products],
            multipliers=[m.to_model() for m in self.multipliers],
        )


class CustomerIn(BaseModel):
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    company_name: str = ""
    custom_message: str = ""

    def to_model(self) -> CustomerFields:
        return CustomerFields(**self.model_dump())


class AppliedMultiplierOut(BaseModel):
    multiplier_id: str
    name: str
    type: MultiplierType
    applied_value: Decimal
    applied_quantity: int
    surcharge: Decimal
    is_discountable: bool


class QuoteItemOut(BaseModel):
    id: str
    product: ProductIn
    quantity: int
    is_base_item_discountable: bool
    applied_multipliers: List[AppliedMultiplierOut]
    base_total: Decimal
    multiplier_adjustment: Decimal
    line_total_before_discount: Decimal
    discountable_amount: Decimal

    @classmethod
    def from_item(cls, item: QuoteItem) -> 'QuoteItemOut':
        surcharges = {c.multiplier_id: c for c in item.surcharge_components}
        applied = []
        for a in item.applied_multipliers:
            component = surcharges.get(a.multiplier_id)
            applied.append(AppliedMultiplierOut(
                multiplier_id=a.multiplier_id,
                name=a.name,
                type=a.type,
                applied_value=a.applied_value,
                applied_quantity=component.applied_quantity if component else 0,
                surcharge=component.amount if component else Decimal(0),
                is_discountable=a.is_discountable,
            ))
        return cls(
            id=item.id,
            product=ProductIn.from_model(item.product),
            quantity=item.quantity,
            is_base_item_discountable=item.is_base_item_discountable,
            applied_multipliers=applied,
            base_total=item.base_total,
            multiplier_adjustment=item.multiplier_adjustment,
            line_total_before_discount=item.line_total_before_discount,
            discountable_amount=item.discountable_amount,
        )


class TotalsOut(BaseModel):
    subtotal_before_discount: Decimal
    discountable_subtotal: Decimal
    total_discount_amount: Decimal
    subtotal_after_discount: Decimal
    tax_amount: Decimal
    grand_total: Decimal


class QuoteOut(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    company_name: str
    custom_message: str
    tax_rate: Decimal
    global_discount_rate: Decimal
    items: List[QuoteItemOut]
    totals: TotalsOut
    display_totals: TotalsOut

    @classmethod
    def from_quote(cls, quote: Optional[Quote], places: int = 2) -> Optional['QuoteOut']:
        if quote is None:
            return None
        return cls(
            id=quote.id,
            customer_name=quote.customer_name,
            customer_email=quote.customer_email,
            customer_phone=quote.customer_phone,
            company_name=quote.company_name,
            custom_message=quote.custom_message,
            tax_rate=quote.tax_rate,
            global_discount_rate=quote.global_discount_rate,
            items=[QuoteItemOut.from_item(i) for i in quote.items],
            totals=TotalsOut(**quote.totals.to_dict()),
            display_totals=TotalsOut(**quote.totals.rounded(places).to_dict()),
        )

    def to_model(self) -> Quote:
        """Rebuild the carried-over fields of a previous quote (items are re-priced)."""
        return Quote(
            id=self.id,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            company_name=self.company_name,
            custom_message=self.custom_message,
            tax_rate=self.tax_rate,
            global_discount_rate=self.global_discount_rate,
        )


class BuildQuoteRequest(BaseModel):
    """Everything a stateless build needs."""
    catalog: CatalogIn
    quantities: Dict[str, str] = {}
    assignments: Dict[str, Dict[str, str]] = {}
    existing_quote: Optional[QuoteOut] = None
    customer: CustomerIn = CustomerIn()
    tax_rate: Decimal = Decimal(0)
    global_discount_rate: Decimal = Decimal(0)


class BuildQuoteResponse(BaseModel):
    quote: Optional[QuoteOut]
    warnings: List[str] = []
    trace: List[str] = []


class QuantityIn(BaseModel):
    quantity: str


class AssignmentIn(BaseModel):
    assignments: Dict[str, str]


class RateIn(BaseModel):
    rate: str


class CustomerUpdate(BaseModel):
    name: str
    email: str = ""
    phone: str = ""


class QuoteDetailsUpdate(BaseModel):
    company_name: str = ""
    custom_message: str = ""


class CustomItemIn(BaseModel):
    name: str
    base_price: str
    unit_type: str = "unit"
    description: str = ""
    is_discountable: bool = True
    quantity: int = Field(default=1, gt=0)


class VoucherIn(BaseModel):
    name: str = "Voucher"
    amount: str
    code: Optional[str] = None


class SessionOut(BaseModel):
    state: str
    catalog_id: str
    catalog_name: str
    quantities: Dict[str, str]
    assignments: Dict[str, Dict[str, str]]
    tax_rate: Decimal
    global_discount_rate: Decimal
    warnings: List[str]
    quote: Optional[QuoteOut]
