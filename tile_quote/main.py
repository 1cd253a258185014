"""
Tile Quote Engine — Main Entry Point

Price a saved quotation (CLI):
    python -m tile_quote path/to/quotation.json

Run as an API server (for the frontend):
    python -m tile_quote --serve
    # or: uvicorn tile_quote.api:app --reload --port 8000

Or import and run programmatically:
    from tile_quote.main import run
    totals = run("path/to/quotation.json")
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from tile_quote.config import get_settings
from tile_quote.models.schemas import QuotationDocument, TotalsSummary
from tile_quote.pricing.profile import ProfileStore
from tile_quote.services.quote_service import QuoteService
from tile_quote.utils.logger import setup_logging


def run(file_path: str) -> TotalsSummary:
    """Load a quotation JSON file, price it and log the totals summary."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    data = json.loads(Path(file_path).read_text(encoding="utf-8"))
    document = QuotationDocument.model_validate(data)

    service = QuoteService(ProfileStore().get_profile())
    priced = service.price_document(document)
    totals = service.totals(priced)

    _print_summary(priced, totals, settings.currency)
    logger.debug(json.dumps(priced.model_dump(mode="json"), indent=2))
    return totals


def _print_summary(document: QuotationDocument, totals: TotalsSummary, currency: str) -> None:
    """Print a human-readable summary of the priced quotation."""
    logger = logging.getLogger(__name__)

    logger.info("")
    logger.info("-" * 60)
    logger.info("  QUOTATION SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  Client:         {document.client_details.client_name or 'N/A'}")
    logger.info(f"  Tile lines:     {len(document.tiles)}")
    for line in document.tiles:
        source = line.price_source.value if line.price_source else "unpriced"
        logger.info(
            f"    {line.category or '?'} | {line.size or '-'} | "
            f"{line.sqm} m² | {line.cartons} ctn | {line.unit_price:,.2f} ({source})"
        )
    logger.info(f"  Total area:     {totals.total_sqm} m²")
    logger.info(f"  Tiles:          {currency} {totals.total_tile_cost:,.2f}")
    logger.info(f"  Materials:      {currency} {totals.total_material_cost:,.2f}")
    logger.info(f"  Workmanship:    {currency} {totals.workmanship_and_maintenance:,.2f}")
    logger.info(f"  Profit:         {currency} {totals.profit_amount:,.2f}")
    logger.info(f"  Adjustments:    {currency} {totals.total_adjustments:,.2f}")
    logger.info(f"  Tax:            {currency} {totals.tax_amount:,.2f}")
    logger.info(f"  Grand total:    {currency} {totals.grand_total:,.2f}")
    logger.info(f"  Deposit:        {currency} {totals.deposit_amount:,.2f}")
    logger.info("-" * 60)


def serve(host: str | None = None, port: int | None = None) -> None:
    """Start the FastAPI server (for frontend communication)."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    host = host or settings.api_host
    port = port or settings.api_port
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("tile_quote.api:app", host=host, port=port, reload=settings.debug)


if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    elif len(sys.argv) > 1:
        run(sys.argv[1])
    else:
        print("Usage: python -m tile_quote <quotation.json> | --serve")
