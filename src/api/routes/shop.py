"""
Mock storefront routes: product listing, cart checkout and the game-pass check.
"""

import json
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from api.errors import to_http_exception
from core.logging import get_logger
from services.catalog import MockCatalog, get_catalog
from services.checkout import CheckoutService, get_checkout_service
from shop.errors import CheckoutError
from shop.models import CheckoutRequest, CheckoutResponse, Product


logger = get_logger(__name__)

router = APIRouter(prefix="/api/shopify", tags=["Shop"])


def serialize_products(products: List[Product]) -> List[Dict[str, Any]]:
    return [p.model_dump(by_alias=True, exclude_none=True) for p in products]


def requested_sector_ids(body: Any) -> List[str]:
    """Pull sector ids out of a {"sectors": [{"id": ...}]} body, ignoring junk."""
    if not isinstance(body, dict):
        return []
    sectors = body.get("sectors")
    if not isinstance(sectors, list):
        return []
    return [
        entry["id"] for entry in sectors
        if isinstance(entry, dict) and isinstance(entry.get("id"), str)
    ]


@router.get("/products", summary="List every mock product")
async def list_products(
    catalog: MockCatalog = Depends(get_catalog),
) -> Dict[str, Any]:
    return {"products": serialize_products(catalog.all())}


@router.post("/products", summary="List mock products, optionally by sector")
async def filter_products(
    request: Request,
    catalog: MockCatalog = Depends(get_catalog),
) -> Dict[str, Any]:
    """
    Body: {"sectors": [{"id": "eyes"}, ...]}. Unknown sectors are ignored;
    a missing, empty or unreadable body returns the whole catalog.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = {}

    products = catalog.filter(requested_sector_ids(body))
    return {"products": serialize_products(products)}


@router.post(
    "/checkout",
    summary="Create a mock checkout for the selected variants",
    response_model=CheckoutResponse,
)
async def create_checkout(
    request: CheckoutRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
) -> CheckoutResponse:
    try:
        web_url = checkout.create_cart_url(request.variant_ids)
    except CheckoutError as e:
        logger.warning("Cart checkout failed", error=str(e))
        raise to_http_exception(e)
    return CheckoutResponse(web_url=web_url)


@router.get("/verify-pass", summary="Game pass check")
async def verify_pass() -> Dict[str, bool]:
    """Demo gate: every visitor holds a pass."""
    return {"ok": True}
