"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080

    # Or use the convenience function
    from api.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Runs on startup:
    - Initialize logging
    - Generate the mock catalog
    - Seed the settings store with the defaults
    """
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting swipe shop API",
        environment=settings.environment,
        port=settings.port,
    )

    from services.catalog import get_catalog
    from services.settings_store import get_settings_store
    catalog = get_catalog()
    store = get_settings_store()
    logger.info(
        "Shop ready",
        products=len(catalog),
        tiers=[tier.id for tier in store.get().tiers],
    )

    yield

    logger.info("Shutting down swipe shop API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Swipe Shop API",
        description="""
        Demo "swipe to shop" backend: mock beauty products served as swipe
        cards in timed rounds, gated by a mock ticket checkout.

        ## Main Endpoints

        - `/api/settings` - Tiers and sector weighting (in-memory)
        - `/api/shopify/*` - Mock catalog and checkout
        - `/api/play/*` - Round sessions

        ## Health Checks

        - `/health`, `/health/detailed`, `/ready`, `/live`
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracing (adds X-Request-ID, logs timing)
    app.add_middleware(RequestTracingMiddleware)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.settings import router as settings_router
    app.include_router(settings_router)

    from api.routes.shop import router as shop_router
    app.include_router(shop_router)

    from api.routes.play import router as play_router
    app.include_router(play_router)

    return app


# Create default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
