"""Services — QuoteService, intake, invoicing and dashboard analytics."""

from tile_quote.services.quote_service import QuoteService
from tile_quote.services.intake_service import parse_collaborator_payload
from tile_quote.services.invoice_service import create_invoice, mark_paid, next_invoice_number
from tile_quote.services.analytics_service import dashboard_metrics

__all__ = [
    "QuoteService",
    "parse_collaborator_payload",
    "create_invoice",
    "mark_paid",
    "next_invoice_number",
    "dashboard_metrics",
]
