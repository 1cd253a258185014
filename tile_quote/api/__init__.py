"""
FastAPI application factory and API package.

Run with:
    uvicorn tile_quote.api:app --reload --port 8000

Or via main.py:
    python -m tile_quote --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tile_quote.config import get_settings
from tile_quote.api.routes import dashboard_router, health_router, quote_router, tile_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application with CORS and all routers mounted."""
    settings = get_settings()

    application = FastAPI(
        title="Tile Quote Engine API",
        description="Pricing and calculation engine for tiling quotations and invoices",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: allow the frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(quote_router, prefix="/api", tags=["Quotes"])
    application.include_router(tile_router, prefix="/api/tiles", tags=["Tiles"])
    application.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])

    logger.info(f"Created {settings.app_name} API")
    return application


# Module-level instance for `uvicorn tile_quote.api:app`
app = create_app()
