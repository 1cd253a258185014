"""
Totals Aggregator — the single source of every monetary figure shown on
screen, in exported documents, in the history list and on the dashboard.

Pipeline (fixed order):
    total_sqm → tile cost → material cost → workmanship → maintenance
    → pre-profit total → profit → subtotal → adjustments
    → post-adjustment subtotal → tax → grand total → deposit

A visibility flag set to False zeroes its component's contribution without
touching the lines, so re-enabling it reproduces the original total.
Malformed inputs degrade to 0; this path never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError, field_validator

from tile_quote.models.schemas import Adjustment, PricedDocument, TotalsSummary, coerce_list
from tile_quote.pricing.line_cost import material_line_cost, tile_line_cost
from tile_quote.pricing.profile import ConfigurationProfile
from tile_quote.utils.numbers import coerce_number, coerce_optional_number, finite_or_zero

logger = logging.getLogger(__name__)


class _TotalsInput(PricedDocument):
    """Everything the aggregator reads from a raw mapping, and nothing else."""
    adjustments: list[Adjustment] = []
    deposit_percentage: Optional[float] = None

    @field_validator("adjustments", mode="before")
    @classmethod
    def _adjustments(cls, v: Any) -> list:
        return coerce_list(v, "adjustments")

    @field_validator("deposit_percentage", mode="before")
    @classmethod
    def _deposit(cls, v: Any) -> Optional[float]:
        return coerce_optional_number(v, "deposit_percentage")


DocumentLike = Union[PricedDocument, Mapping[str, Any]]


class TotalsAggregator:
    """Computes a TotalsSummary for any quotation or invoice against one profile."""

    def __init__(self, profile: ConfigurationProfile):
        self.profile = profile

    def _as_document(self, document: DocumentLike) -> PricedDocument:
        if isinstance(document, PricedDocument):
            return document
        if not isinstance(document, Mapping):
            logger.warning(f"Cannot total a {type(document).__name__}; treating as empty")
            return _TotalsInput()
        try:
            return _TotalsInput.model_validate(dict(document))
        except ValidationError as e:
            logger.warning(f"Malformed document treated as empty for totals: {e}")
            return _TotalsInput()

    @staticmethod
    def _flag(value: Optional[bool], default: bool) -> bool:
        return default if value is None else bool(value)

    def aggregate(self, document: DocumentLike) -> TotalsSummary:
        doc = self._as_document(document)
        profile = self.profile

        show_materials = self._flag(doc.show_materials, profile.show_materials_default)
        show_adjustments = self._flag(doc.show_adjustments, profile.show_adjustments_default)
        show_workmanship = self._flag(doc.show_workmanship, True)
        show_maintenance = self._flag(doc.show_maintenance, profile.show_maintenance)
        show_tax = self._flag(doc.show_tax, profile.show_tax)

        tiles = doc.tiles or []
        materials = doc.materials or []
        adjustments = getattr(doc, "adjustments", None) or []

        # Area always counts: workmanship is charged per m² laid.
        # Each step degrades an overflow (inf/NaN) to 0.
        total_sqm = finite_or_zero(
            sum(coerce_number(t.sqm, "sqm") for t in tiles), "total_sqm"
        )
        total_tile_cost = finite_or_zero(
            sum(tile_line_cost(t) for t in tiles), "total_tile_cost"
        )
        total_material_cost = finite_or_zero(
            sum(material_line_cost(m) for m in materials) if show_materials else 0.0,
            "total_material_cost",
        )

        workmanship_rate = coerce_number(doc.workmanship_rate, "workmanship_rate")
        workmanship_cost = finite_or_zero(
            total_sqm * workmanship_rate if show_workmanship else 0.0, "workmanship_cost"
        )
        maintenance_cost = (
            coerce_number(doc.maintenance, "maintenance") if show_maintenance else 0.0
        )
        workmanship_and_maintenance = finite_or_zero(
            workmanship_cost + maintenance_cost, "workmanship_and_maintenance"
        )

        pre_profit_total = finite_or_zero(
            total_tile_cost + total_material_cost + workmanship_and_maintenance,
            "pre_profit_total",
        )

        profit_percentage = coerce_optional_number(doc.profit_percentage, "profit_percentage")
        profit_amount = finite_or_zero(
            pre_profit_total * profit_percentage / 100 if profit_percentage else 0.0,
            "profit_amount",
        )
        subtotal = finite_or_zero(pre_profit_total + profit_amount, "subtotal")

        total_adjustments = finite_or_zero(
            sum(coerce_number(a.amount, "amount") for a in adjustments)
            if show_adjustments else 0.0,
            "total_adjustments",
        )
        post_adjustment_subtotal = finite_or_zero(
            subtotal + total_adjustments, "post_adjustment_subtotal"
        )

        tax_percentage = coerce_number(profile.tax_percentage, "tax_percentage")
        tax_amount = finite_or_zero(
            post_adjustment_subtotal * tax_percentage / 100 if show_tax else 0.0,
            "tax_amount",
        )
        grand_total = finite_or_zero(post_adjustment_subtotal + tax_amount, "grand_total")

        deposit_percentage = coerce_optional_number(
            getattr(doc, "deposit_percentage", None), "deposit_percentage"
        )
        deposit_amount = finite_or_zero(
            grand_total * deposit_percentage / 100 if deposit_percentage else 0.0,
            "deposit_amount",
        )

        return TotalsSummary(
            total_sqm=total_sqm,
            total_tile_cost=total_tile_cost,
            total_material_cost=total_material_cost,
            workmanship_cost=workmanship_cost,
            maintenance_cost=maintenance_cost,
            workmanship_and_maintenance=workmanship_and_maintenance,
            pre_profit_total=pre_profit_total,
            profit_amount=profit_amount,
            subtotal=subtotal,
            total_adjustments=total_adjustments,
            post_adjustment_subtotal=post_adjustment_subtotal,
            tax_amount=tax_amount,
            grand_total=grand_total,
            deposit_amount=deposit_amount,
        )


def calculate_totals(document: DocumentLike, profile: ConfigurationProfile) -> TotalsSummary:
    """Functional form of TotalsAggregator(profile).aggregate(document)."""
    return TotalsAggregator(profile).aggregate(document)
