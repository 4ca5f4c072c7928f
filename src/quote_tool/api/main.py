import logging
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from quote_tool import __version__
from quote_tool.config.logging import setup_logging
from quote_tool.config.settings import get_settings
from quote_tool.data.catalog import Catalog
from quote_tool.engine import QuoteEngine, QuoteEngineError
from quote_tool.api.contact_api import router as contact_router
from quote_tool.api.state import get_catalog

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Quote Tool API",
    description="Price configurator and contact relay for trade-business websites",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(contact_router)


class SelectionRequest(BaseModel):
    base: Optional[str] = None
    addons: List[str] = []
    details: Dict[str, str] = {}
    contract: Optional[str] = None


@app.exception_handler(QuoteEngineError)
async def engine_error_handler(request: Request, exc: QuoteEngineError):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": str(exc)})


def _engine_for(req: SelectionRequest, catalog: Catalog) -> QuoteEngine:
    return QuoteEngine.configured(
        catalog,
        base=req.base,
        addons=req.addons,
        details=req.details,
        contract=req.contract,
        **get_settings().engine_options(),
    )


@app.get("/")
async def root():
    return {"status": "online", "message": "Quote Tool API Active"}


@app.get("/catalog")
async def get_catalog_entries(catalog: Catalog = Depends(get_catalog)):
    return catalog.to_dict()


@app.post("/quote/calculate")
async def calculate_quote(req: SelectionRequest, catalog: Catalog = Depends(get_catalog)):
    """Price a selection and report which wizard steps it completes."""
    engine = _engine_for(req, catalog)
    return {
        "prices": engine.snapshot.to_dict(),
        "items": [
            {"label": item.label, "price": item.price, "kind": item.kind}
            for item in engine.selected_items()
        ],
        "steps": {
            str(step): engine.step_complete(step)
            for step in range(1, engine.total_steps + 1)
        },
        "trace": [
            {"step": t.step, "description": t.description, "value": t.value}
            for t in engine.explain()
        ],
    }


@app.post("/quote")
async def generate_quote(req: SelectionRequest, catalog: Catalog = Depends(get_catalog)):
    """Freeze a complete selection into a quote record."""
    engine = _engine_for(req, catalog)
    return engine.generate_quote().to_dict()


@app.get("/system/status")
async def get_status(catalog: Catalog = Depends(get_catalog)):
    settings = get_settings()
    return {
        "engine_active": True,
        "catalog": {
            "packages": len(catalog.packages),
            "addons": len(catalog.addons),
            "detail_groups": len(catalog.detail_attributes()),
            "contract_terms": len(catalog.contract_terms),
        },
        "pricing": {
            "rounding": settings.rounding,
            "modifier_mode": settings.modifier_mode,
            "min_details_for_contract_step": settings.min_details_for_contract_step,
        },
    }
