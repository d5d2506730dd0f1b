from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from pricer import __version__
from pricer.api.schemas import BuildQuoteRequest, BuildQuoteResponse, QuoteOut
from pricer.api.session_api import router as session_router
from pricer.config.settings import get_settings
from pricer.data.quote_export import default_export_name, export_quote_csv
from pricer.engine import QuoteBuilder
from pricer.errors import PricerError

app = FastAPI(
    title="Pricer API",
    description="Quote pricing for contractor catalogs",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include quote session API
app.include_router(session_router)

builder = QuoteBuilder()


@app.exception_handler(PricerError)
async def pricer_error_handler(request: Request, exc: PricerError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/")
async def root():
    return {"status": "online", "message": "Pricer API Active", "version": __version__}


def _build(req: BuildQuoteRequest):
    return builder.build_result(
        catalog=req.catalog.to_model(),
        quantities=req.quantities,
        assignments=req.assignments,
        existing_quote=req.existing_quote.to_model() if req.existing_quote else None,
        customer=req.customer.to_model(),
        tax_rate=req.tax_rate,
        global_discount_rate=req.global_discount_rate,
    )


@app.post("/quotes/build", response_model=BuildQuoteResponse)
async def build_quote(req: BuildQuoteRequest):
    """Price a quote from a full snapshot of catalog and inputs. quote is null when nothing is ordered."""
    result = _build(req)
    return BuildQuoteResponse(
        quote=QuoteOut.from_quote(result.quote, get_settings().money_places),
        warnings=result.warnings,
        trace=result.get_trace_text().splitlines(),
    )


@app.post("/quotes/export/csv")
async def export_quote(req: BuildQuoteRequest):
    result = _build(req)
    if result.quote is None:
        return JSONResponse(status_code=404, content={"status": "error", "message": "Nothing ordered, no quote"})
    return PlainTextResponse(
        export_quote_csv(result.quote, get_settings().money_places),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{default_export_name(result.quote)}"'},
    )
