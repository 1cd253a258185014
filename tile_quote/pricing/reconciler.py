"""
Quantity Reconciler — derives the missing half of (area, cartons) from the
half the caller declared authoritative for this edit.

The driving field is explicit (FromArea / FromCartons / Unspecified), never
guessed from which numbers happen to be non-zero, and only one direction is
derived per call:

  FromArea      cartons = ceil(sqm / rate)       existing cartons discarded
  FromCartons   sqm = round(cartons * rate, 2)
  Unspecified   sqm = 0, cartons = 0             nothing is invented

Round trip cartons → sqm → cartons is stable; sqm → cartons → sqm is not
(ceiling loses information), and that asymmetry is expected.
"""

from __future__ import annotations

import logging
import math
from typing import Union

from tile_quote.models.enums import QuantityKind
from tile_quote.models.schemas import (
    FromArea,
    FromCartons,
    Reconciliation,
    TileLineItem,
    Unspecified,
)
from tile_quote.pricing.profile import ConfigurationError, ConfigurationProfile
from tile_quote.pricing.rate_resolver import RateResolver
from tile_quote.utils.numbers import coerce_number, round2

logger = logging.getLogger(__name__)

QuantityEdit = Union[FromArea, FromCartons, Unspecified]

# Quotients this close to a whole number are float noise, not a partial carton
_WHOLE_TOLERANCE = 1e-9


def cartons_for_area(sqm: float, coverage_rate: float) -> int:
    """Cartons needed to cover ``sqm``; always rounds up, exact quotients unchanged."""
    _check_rate(coverage_rate)
    if sqm <= 0:
        return 0
    quotient = sqm / coverage_rate
    nearest = round(quotient)
    if abs(quotient - nearest) <= _WHOLE_TOLERANCE:
        return int(nearest)
    return int(math.ceil(quotient))


def area_for_cartons(cartons: float, coverage_rate: float) -> float:
    """Area covered by ``cartons``, rounded to 2 decimal places."""
    _check_rate(coverage_rate)
    if cartons <= 0:
        return 0.0
    return round2(cartons * coverage_rate)


def _check_rate(coverage_rate: float) -> None:
    if not coverage_rate > 0:
        raise ConfigurationError(f"coverage rate must be > 0, got {coverage_rate}")


def reconcile(quantity: QuantityEdit, coverage_rate: float) -> Reconciliation:
    """Derive (sqm, cartons) from the driving field in ``quantity``."""
    if isinstance(quantity, FromArea):
        sqm = coerce_number(quantity.sqm, "sqm")
        if sqm > 0:
            return Reconciliation(
                sqm=sqm,
                cartons=cartons_for_area(sqm, coverage_rate),
                driving=QuantityKind.FROM_AREA,
            )
    elif isinstance(quantity, FromCartons):
        cartons = math.ceil(coerce_number(quantity.cartons, "cartons"))
        if cartons > 0:
            return Reconciliation(
                sqm=area_for_cartons(cartons, coverage_rate),
                cartons=cartons,
                driving=QuantityKind.FROM_CARTONS,
            )

    _check_rate(coverage_rate)
    return Reconciliation(sqm=0.0, cartons=0, driving=QuantityKind(quantity.kind))


def quantity_from_line(line: TileLineItem) -> QuantityEdit:
    """
    Driving field for a line that arrives without an edit event (AI output,
    stored documents): area wins when present, then cartons, else nothing.
    """
    if line.sqm > 0:
        return FromArea(sqm=line.sqm)
    if line.cartons > 0:
        return FromCartons(cartons=line.cartons)
    return Unspecified()


class QuantityReconciler:
    """Applies reconciliation to whole tile lines using the profile's coverage rates."""

    def __init__(self, profile: ConfigurationProfile):
        self.profile = profile
        self._resolver = RateResolver(profile)

    def reconcile_line(self, line: TileLineItem, quantity: QuantityEdit | None = None) -> TileLineItem:
        """Return a copy of ``line`` with sqm/cartons derived from ``quantity``."""
        if quantity is None:
            quantity = quantity_from_line(line)
        rate = self._resolver.coverage_rate(line.category)
        result = reconcile(quantity, rate)
        logger.debug(
            f"Reconciled '{line.category}' ({result.driving.value}): "
            f"{result.sqm} m² → {result.cartons} cartons @ {rate} m²/carton"
        )
        return line.model_copy(update={"sqm": result.sqm, "cartons": result.cartons})
