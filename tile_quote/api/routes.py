"""
API routes — thin HTTP layer that delegates to the pricing engine and services.

Routes:
  GET  /health                   → API health check
  GET  /api/profile              → Active configuration profile
  POST /api/quotes/totals        → TotalsSummary for a document
  POST /api/quotes/price         → Priced document + totals
  POST /api/quotes/intake        → Collaborator payload → priced quotation + totals
  POST /api/tiles/resolve        → Price / coverage rate for one tile line
  POST /api/tiles/reconcile      → Derive sqm/cartons from the driving field
  POST /api/tiles/wastage        → Add/remove wastage on an area
  POST /api/dashboard/metrics    → Dashboard figures
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from tile_quote.config import get_settings
from tile_quote.models.enums import WastageDirection
from tile_quote.models.schemas import (
    Expense,
    InvoiceDocument,
    QuantityInput,
    QuotationDocument,
    RateResolution,
    Reconciliation,
    TileLineItem,
    TotalsSummary,
    WastageResult,
)
from tile_quote.pricing.profile import ConfigurationError, ConfigurationProfile, ProfileStore
from tile_quote.pricing.rate_resolver import RateResolver
from tile_quote.pricing.reconciler import reconcile
from tile_quote.pricing.totals import calculate_totals
from tile_quote.pricing.wastage import apply_wastage
from tile_quote.services.analytics_service import DashboardMetrics, dashboard_metrics
from tile_quote.services.intake_service import parse_collaborator_payload
from tile_quote.services.quote_service import QuoteService

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
quote_router = APIRouter()
tile_router = APIRouter()
dashboard_router = APIRouter()


@lru_cache()
def get_profile_store() -> ProfileStore:
    return ProfileStore()


def get_profile() -> ConfigurationProfile:
    """Dependency: the active profile; a broken profile refuses every request."""
    try:
        return get_profile_store().get_profile()
    except ConfigurationError as e:
        logger.error(f"Configuration profile unusable: {e}")
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")


# ── Request / response schemas ───────────────────────────
class PricedQuoteResponse(BaseModel):
    document: QuotationDocument
    totals: TotalsSummary


class IntakeRequest(BaseModel):
    payload: str | dict[str, Any]


class ReconcileRequest(BaseModel):
    category: str = ""
    quantity: QuantityInput


class WastageRequest(BaseModel):
    category: str = ""
    sqm: float
    direction: WastageDirection


class DashboardRequest(BaseModel):
    quotations: list[QuotationDocument] = []
    invoices: list[InvoiceDocument] = []
    expenses: list[Expense] = []
    since: Optional[datetime] = None


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Profile ──────────────────────────────────────────────

@quote_router.get("/profile", response_model=ConfigurationProfile)
async def read_profile(profile: ConfigurationProfile = Depends(get_profile)):
    return profile


# ── Quotes ───────────────────────────────────────────────

@quote_router.post("/quotes/totals", response_model=TotalsSummary)
async def quote_totals(
    document: dict[str, Any],
    profile: ConfigurationProfile = Depends(get_profile),
):
    # Raw mapping on purpose: malformed fields degrade instead of returning 422
    return calculate_totals(document, profile)


@quote_router.post("/quotes/price", response_model=PricedQuoteResponse)
async def price_quote(
    document: QuotationDocument,
    profile: ConfigurationProfile = Depends(get_profile),
):
    service = QuoteService(profile)
    priced = service.price_document(document)
    return PricedQuoteResponse(document=priced, totals=service.totals(priced))


@quote_router.post("/quotes/intake", response_model=PricedQuoteResponse)
async def intake_quote(
    request: IntakeRequest,
    profile: ConfigurationProfile = Depends(get_profile),
):
    try:
        document = parse_collaborator_payload(request.payload, profile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PricedQuoteResponse(document=document, totals=calculate_totals(document, profile))


# ── Tiles ────────────────────────────────────────────────

@tile_router.post("/resolve", response_model=RateResolution)
async def resolve_tile(
    line: TileLineItem,
    profile: ConfigurationProfile = Depends(get_profile),
):
    return RateResolver(profile).resolve(line)


@tile_router.post("/reconcile", response_model=Reconciliation)
async def reconcile_tile(
    request: ReconcileRequest,
    profile: ConfigurationProfile = Depends(get_profile),
):
    rate = RateResolver(profile).coverage_rate(request.category)
    return reconcile(request.quantity, rate)


@tile_router.post("/wastage", response_model=WastageResult)
async def wastage_tile(
    request: WastageRequest,
    profile: ConfigurationProfile = Depends(get_profile),
):
    rate = RateResolver(profile).coverage_rate(request.category)
    return apply_wastage(request.sqm, profile.wastage_factor, request.direction, rate)


# ── Dashboard ────────────────────────────────────────────

@dashboard_router.post("/metrics", response_model=DashboardMetrics)
async def metrics(
    request: DashboardRequest,
    profile: ConfigurationProfile = Depends(get_profile),
):
    return dashboard_metrics(
        request.quotations, request.invoices, request.expenses, profile, since=request.since
    )
