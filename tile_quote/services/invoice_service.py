"""
Invoice Service — raises an invoice from an accepted quotation.

Invoice numbers are sequential per prefix and year: ``INV-2026-0001``.
The invoice copies the quotation's priced content and visibility flags
verbatim, so its totals come out of the same aggregator and match the
quotation line for line (minus adjustments and deposit, which invoices do
not carry).
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional

from tile_quote.config import Settings, get_settings
from tile_quote.models.enums import InvoiceStatus, QuotationStatus
from tile_quote.models.schemas import InvoiceDocument, QuotationDocument

logger = logging.getLogger(__name__)


def next_invoice_number(
    existing_numbers: Iterable[str],
    prefix: str = "INV",
    year: Optional[int] = None,
) -> str:
    """One past the highest ``PREFIX-YEAR-NNNN`` sequence already used."""
    prefix = prefix or "INV"
    year = year or datetime.now().year
    pattern = re.compile(rf"^{re.escape(prefix)}-{year}-(\d+)")

    numbers = [n for n in existing_numbers if n]
    next_sequence = 1
    for number in numbers:
        match = pattern.match(number)
        if match:
            next_sequence = max(next_sequence, int(match.group(1)) + 1)

    candidate = f"{prefix}-{year}-{next_sequence:04d}"
    taken = set(numbers)
    while candidate in taken:
        next_sequence += 1
        candidate = f"{prefix}-{year}-{next_sequence:04d}"
    return candidate


def create_invoice(
    quotation: QuotationDocument,
    existing_invoices: Iterable[InvoiceDocument] = (),
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> tuple[InvoiceDocument, QuotationDocument]:
    """
    Build the invoice for ``quotation`` and return it together with the
    quotation marked as invoiced. Raises ValueError if already invoiced.
    """
    if quotation.invoice_id:
        raise ValueError(f"Quotation {quotation.id} has already been invoiced ({quotation.invoice_id})")

    settings = settings or get_settings()
    now = now or datetime.now()

    number = next_invoice_number(
        (inv.invoice_number for inv in existing_invoices),
        prefix=settings.invoice_prefix,
        year=now.year,
    )

    invoice = InvoiceDocument(
        id=str(uuid.uuid4()),
        quotation_id=quotation.id,
        invoice_number=number,
        invoice_date=now,
        due_date=now + timedelta(days=settings.invoice_due_days),
        status=InvoiceStatus.UNPAID,
        client_details=quotation.client_details.model_copy(),
        tiles=[t.model_copy() for t in quotation.tiles],
        materials=[m.model_copy() for m in quotation.materials],
        workmanship_rate=quotation.workmanship_rate,
        maintenance=quotation.maintenance,
        profit_percentage=quotation.profit_percentage,
        payment_terms=settings.default_payment_terms,
        bank_details=settings.default_bank_details,
        invoice_notes=settings.default_invoice_notes,
        show_materials=quotation.show_materials,
        show_adjustments=quotation.show_adjustments,
        show_workmanship=quotation.show_workmanship,
        show_maintenance=quotation.show_maintenance,
        show_tax=quotation.show_tax,
    )
    updated_quote = quotation.model_copy(
        update={"status": QuotationStatus.INVOICED, "invoice_id": invoice.id}
    )
    logger.info(f"Created invoice {number} for quotation {quotation.id}")
    return invoice, updated_quote


def mark_paid(invoice: InvoiceDocument, paid_at: Optional[datetime] = None) -> InvoiceDocument:
    """Return ``invoice`` marked as paid on ``paid_at`` (default now)."""
    return invoice.model_copy(
        update={"status": InvoiceStatus.PAID, "payment_date": paid_at or datetime.now()}
    )
