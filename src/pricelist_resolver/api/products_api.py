"""
Products API - FastAPI router for barcode rule lookups.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..engine import ProductResolver
from ..errors import BackendError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])

NOT_FOUND_MESSAGE = "Product not found"
BACKEND_ERROR_MESSAGE = "Error looking up product and rules"


class BarcodeRequest(BaseModel):
    """Request model for a barcode lookup."""
    barcode: str


def get_resolver(request: Request) -> ProductResolver:
    """Resolver created at startup."""
    return request.app.state.resolver


async def _lookup(resolver: ProductResolver, barcode: str, include_trace: bool = False):
    try:
        result = await resolver.resolve(barcode)
    except BackendError as e:
        # Details stay in the log; clients only get the generic message
        logger.error(f"[API] Lookup for barcode {barcode} failed: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": BACKEND_ERROR_MESSAGE})

    if result is None:
        return JSONResponse(status_code=404, content={"success": False, "error": NOT_FOUND_MESSAGE})

    return result.to_dict(include_trace=include_trace)


@router.post("/product-by-barcode")
async def product_by_barcode(req: BarcodeRequest, resolver: ProductResolver = Depends(get_resolver)):
    """Resolve the rules for the barcode in the request body."""
    return await _lookup(resolver, req.barcode)


@router.get("/product-by-barcode/{barcode}")
async def product_by_barcode_path(
    barcode: str,
    trace: bool = False,
    resolver: ProductResolver = Depends(get_resolver),
):
    """Resolve the rules for a barcode given in the path."""
    return await _lookup(resolver, barcode, include_trace=trace)
