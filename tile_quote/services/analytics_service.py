"""
Analytics Service — dashboard figures over quotations, invoices and expenses.

Every document amount is the aggregator's grand total; nothing here
re-derives a total on its own.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel

from tile_quote.models.enums import InvoiceStatus, QuotationStatus
from tile_quote.models.schemas import Expense, InvoiceDocument, QuotationDocument
from tile_quote.pricing.profile import ConfigurationProfile
from tile_quote.pricing.totals import TotalsAggregator

logger = logging.getLogger(__name__)

MONTHS_OF_HISTORY = 6


class MonthlyPerformance(BaseModel):
    month: str  # "YYYY-MM"
    revenue: float = 0.0
    expenses: float = 0.0


class DashboardMetrics(BaseModel):
    total_quoted: float = 0.0
    total_quotations: int = 0
    acceptance_rate: float = 0.0  # percent
    invoices_generated: int = 0
    total_revenue: float = 0.0
    paid_this_month: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    expense_breakdown: dict[str, float] = {}
    monthly_performance: list[MonthlyPerformance] = []


def _month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def _months_back(now: datetime, months: int) -> datetime:
    """First day of the month ``months`` before ``now``'s month."""
    index = now.year * 12 + (now.month - 1) - months
    return datetime(index // 12, index % 12 + 1, 1)


def dashboard_metrics(
    quotations: Sequence[QuotationDocument],
    invoices: Sequence[InvoiceDocument],
    expenses: Sequence[Expense],
    profile: ConfigurationProfile,
    since: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> DashboardMetrics:
    """Dashboard metrics for documents dated on or after ``since`` (all when None)."""
    aggregator = TotalsAggregator(profile)
    now = now or datetime.now()

    def in_range(moment: datetime) -> bool:
        return since is None or moment.replace(tzinfo=None) >= since.replace(tzinfo=None)

    quotes = [q for q in quotations if in_range(q.date)]
    invs = [i for i in invoices if in_range(i.invoice_date)]
    exps = [e for e in expenses if in_range(e.date)]

    total_quoted = sum(aggregator.aggregate(q).grand_total for q in quotes)
    accepted = [
        q for q in quotes
        if q.status in (QuotationStatus.ACCEPTED, QuotationStatus.INVOICED)
    ]
    acceptance_rate = len(accepted) / len(quotes) * 100 if quotes else 0.0

    paid = [i for i in invs if i.status == InvoiceStatus.PAID]
    paid_totals = {i.id: aggregator.aggregate(i).grand_total for i in paid}
    total_revenue = sum(paid_totals.values())

    start_of_month = datetime(now.year, now.month, 1)
    paid_this_month = sum(
        paid_totals[i.id] for i in paid
        if i.payment_date and i.payment_date.replace(tzinfo=None) >= start_of_month
    )

    total_expenses = sum(e.amount for e in exps)
    breakdown: dict[str, float] = defaultdict(float)
    for e in exps:
        breakdown[e.category] += e.amount

    # Revenue/expense series for the current month and the five before it
    window_start = _months_back(now, MONTHS_OF_HISTORY - 1)
    monthly: dict[str, MonthlyPerformance] = {}
    for i in paid:
        moment = (i.payment_date or i.invoice_date).replace(tzinfo=None)
        if moment < window_start:
            continue
        key = _month_key(moment)
        monthly.setdefault(key, MonthlyPerformance(month=key)).revenue += paid_totals[i.id]
    for e in exps:
        moment = e.date.replace(tzinfo=None)
        if moment < window_start:
            continue
        key = _month_key(moment)
        monthly.setdefault(key, MonthlyPerformance(month=key)).expenses += e.amount

    metrics = DashboardMetrics(
        total_quoted=total_quoted,
        total_quotations=len(quotes),
        acceptance_rate=acceptance_rate,
        invoices_generated=len(invs),
        total_revenue=total_revenue,
        paid_this_month=paid_this_month,
        total_expenses=total_expenses,
        net_profit=total_revenue - total_expenses,
        expense_breakdown=dict(breakdown),
        monthly_performance=[monthly[k] for k in sorted(monthly)],
    )
    logger.debug(
        f"Dashboard: {metrics.total_quotations} quotations, "
        f"revenue={metrics.total_revenue}, expenses={metrics.total_expenses}"
    )
    return metrics
