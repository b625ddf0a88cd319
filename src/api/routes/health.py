"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Any, Dict

from fastapi import APIRouter

from config.settings import get_settings
from services.catalog import get_catalog
from services.session_manager import get_round_session_manager
from services.settings_store import get_settings_store


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": "swipe-shop-api",
    }


@router.get("/health/detailed")
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check.

    Checks:
    - Configuration loaded
    - Mock catalog generated
    - Settings store readable
    """
    settings = get_settings()

    catalog_status = "ok"
    catalog_error = None
    catalog_size = 0
    try:
        catalog_size = len(get_catalog())
        if catalog_size == 0:
            catalog_status = "empty"
    except Exception as e:
        catalog_status = "error"
        catalog_error = str(e)

    return {
        "status": "healthy" if catalog_status == "ok" else "degraded",
        "service": "swipe-shop-api",
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "catalog": {
                "status": catalog_status,
                "products": catalog_size,
                "error": catalog_error,
            },
            "settings": {
                "tiers": [tier.id for tier in get_settings_store().get().tiers],
            },
            "sessions": get_round_session_manager().get_stats(),
        },
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """
    Readiness probe: ready once the catalog has products to serve.
    """
    if len(get_catalog()) == 0:
        return {"status": "not_ready", "reason": "catalog_empty"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}
