"""
Session API - FastAPI router for the interactive quote session.

Every mutating endpoint returns the full session, including the re-priced
quote (null once nothing is ordered).
"""
import io
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, PlainTextResponse

from ..config.settings import get_settings
from ..data.quote_export import default_export_name, export_quote_csv, export_quote_excel
from ..engine.models import ProductSortCriteria
from ..services.catalog_service import CatalogStore, products_from_csv, search_products, sort_products
from ..services.quote_session import QuoteSession
from .schemas import (
    AssignmentIn, CatalogIn, CustomItemIn, CustomerUpdate, MultiplierIn, ProductIn,
    QuantityIn, QuoteDetailsUpdate, QuoteOut, RateIn, SessionOut, VoucherIn,
)
from .state import get_session, get_store

router = APIRouter(prefix="/api/session", tags=["session"])


def _session_out(session: QuoteSession) -> SessionOut:
    return SessionOut(
        state=session.state.value,
        catalog_id=session.catalog.id,
        catalog_name=session.catalog.name,
        quantities=dict(session.quantities),
        assignments={pid: dict(a) for pid, a in session.assignments.items()},
        tax_rate=session.tax_rate,
        global_discount_rate=session.global_discount_rate,
        warnings=session.warnings,
        quote=QuoteOut.from_quote(session.current_quote, get_settings().money_places),
    )


# Endpoints

@router.get("", response_model=SessionOut)
async def get_state(session: QuoteSession = Depends(get_session)):
    """Current session state and quote."""
    return _session_out(session)


@router.put("/catalog", response_model=SessionOut)
async def load_catalog(catalog: CatalogIn, session: QuoteSession = Depends(get_session)):
    """Replace the active catalog. Clears quantities, assignments and the quote."""
    session.load_catalog(catalog.to_model())
    return _session_out(session)


@router.get("/catalogs")
async def list_catalogs(store: CatalogStore = Depends(get_store)):
    return store.list_catalogs()


@router.post("/catalogs/{catalog_id}/load", response_model=SessionOut)
async def load_stored_catalog(
    catalog_id: str,
    session: QuoteSession = Depends(get_session),
    store: CatalogStore = Depends(get_store),
):
    session.load_catalog(store.load_catalog(catalog_id))
    return _session_out(session)


@router.post("/catalog/save")
async def save_catalog(
    session: QuoteSession = Depends(get_session),
    store: CatalogStore = Depends(get_store),
):
    path = store.save_catalog(session.catalog)
    return {"success": True, "catalog_id": session.catalog.id, "path": str(path)}


@router.get("/products", response_model=list[ProductIn])
async def list_products(
    q: Optional[str] = None,
    sort: ProductSortCriteria = ProductSortCriteria.NAME_ASC,
    session: QuoteSession = Depends(get_session),
):
    """Catalog products, filtered by name/description/category and sorted."""
    products = sort_products(search_products(session.catalog.products, q), sort)
    return [ProductIn.from_model(p) for p in products]


@router.post("/catalog/import")
async def import_products_csv(request: Request, session: QuoteSession = Depends(get_session)):
    """Bulk-add products from a CSV request body (columns: name, base_price, ...)."""
    body = await request.body()
    report = products_from_csv(io.BytesIO(body))
    imported = session.import_products(report.products)
    return {"success": True, "imported": imported, "warnings": report.warnings}


@router.put("/products", response_model=SessionOut)
async def add_or_update_product(product: ProductIn, session: QuoteSession = Depends(get_session)):
    session.add_or_update_product(product.to_model())
    return _session_out(session)


@router.delete("/products/{product_id}", response_model=SessionOut)
async def delete_product(product_id: str, session: QuoteSession = Depends(get_session)):
    session.delete_product(product_id)
    return _session_out(session)


@router.put("/multipliers", response_model=SessionOut)
async def add_or_update_multiplier(multiplier: MultiplierIn, session: QuoteSession = Depends(get_session)):
    session.add_or_update_multiplier(multiplier.to_model())
    return _session_out(session)


@router.delete("/multipliers/{multiplier_id}", response_model=SessionOut)
async def delete_multiplier(multiplier_id: str, session: QuoteSession = Depends(get_session)):
    session.delete_multiplier(multiplier_id)
    return _session_out(session)


@router.put("/quantities/{product_id}", response_model=SessionOut)
async def update_quantity(product_id: str, body: QuantityIn, session: QuoteSession = Depends(get_session)):
    session.update_quantity(product_id, body.quantity)
    return _session_out(session)


@router.put("/assignments/{product_id}", response_model=SessionOut)
async def assign_multipliers(product_id: str, body: AssignmentIn, session: QuoteSession = Depends(get_session)):
    session.confirm_multiplier_assignment(product_id, body.assignments)
    return _session_out(session)


@router.put("/discount", response_model=SessionOut)
async def set_discount(body: RateIn, session: QuoteSession = Depends(get_session)):
    """Set the global discount rate; values outside 0-100 are clamped."""
    session.set_global_discount(body.rate)
    return _session_out(session)


@router.put("/tax", response_model=SessionOut)
async def set_tax(body: RateIn, session: QuoteSession = Depends(get_session)):
    """Set the tax rate; negative values become 0."""
    session.set_tax_rate(body.rate)
    return _session_out(session)


@router.put("/customer", response_model=SessionOut)
async def update_customer(body: CustomerUpdate, session: QuoteSession = Depends(get_session)):
    session.update_customer(body.name, body.email, body.phone)
    return _session_out(session)


@router.put("/details", response_model=SessionOut)
async def update_details(body: QuoteDetailsUpdate, session: QuoteSession = Depends(get_session)):
    session.update_quote_details(body.company_name, body.custom_message)
    return _session_out(session)


@router.post("/custom-items", response_model=SessionOut)
async def add_custom_item(body: CustomItemIn, session: QuoteSession = Depends(get_session)):
    session.add_custom_item(
        name=body.name,
        base_price=body.base_price,
        unit_type=body.unit_type,
        description=body.description,
        is_discountable=body.is_discountable,
        quantity=body.quantity,
    )
    return _session_out(session)


@router.post("/vouchers", response_model=SessionOut)
async def add_voucher(body: VoucherIn, session: QuoteSession = Depends(get_session)):
    session.add_voucher(body.name, body.amount, body.code)
    return _session_out(session)


@router.delete("/items/{item_id}", response_model=SessionOut)
async def remove_item(item_id: str, session: QuoteSession = Depends(get_session)):
    """Remove a quote line. Removing the last line leaves no quote."""
    session.remove_quote_item(item_id)
    return _session_out(session)


@router.post("/clear", response_model=SessionOut)
async def clear(session: QuoteSession = Depends(get_session)):
    session.clear_all()
    return _session_out(session)


@router.get("/quote/csv")
async def export_csv(session: QuoteSession = Depends(get_session)):
    quote = session.current_quote
    if quote is None:
        raise HTTPException(status_code=404, detail="Nothing ordered, no quote")
    return PlainTextResponse(
        export_quote_csv(quote, get_settings().money_places),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{default_export_name(quote)}"'},
    )


@router.post("/quote/excel")
def export_excel(session: QuoteSession = Depends(get_session)):
    """Write the quote workbook to the exports directory and download it."""
    quote = session.current_quote
    if quote is None:
        raise HTTPException(status_code=404, detail="Nothing ordered, no quote")
    name = default_export_name(quote, "xlsx")
    path = export_quote_excel(quote, session.settings.exports_dir / name, session.settings.money_places)
    return FileResponse(
        path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=name,
    )
