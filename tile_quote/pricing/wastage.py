"""
Wastage Transform — explicit, per-line conversion between net area and
gross (wastage-inclusive) area. Never applied automatically.

"add" multiplies by the wastage factor, "remove" divides by it; the new
area is rounded to 2 dp and cartons are recomputed from it with the usual
round-up rule. Add-then-remove returns the original area only up to that
rounding (at most 0.01 m² of drift per toggle).
"""

from __future__ import annotations

import logging

from tile_quote.models.enums import WastageDirection
from tile_quote.models.schemas import TileLineItem, WastageResult
from tile_quote.pricing.profile import ConfigurationError, ConfigurationProfile
from tile_quote.pricing.rate_resolver import RateResolver
from tile_quote.pricing.reconciler import cartons_for_area
from tile_quote.utils.numbers import coerce_number, round2

logger = logging.getLogger(__name__)


def apply_wastage(
    sqm: float,
    wastage_factor: float,
    direction: WastageDirection | str,
    coverage_rate: float,
) -> WastageResult:
    """Convert ``sqm`` net→gross ("add") or gross→net ("remove") and re-derive cartons."""
    direction = WastageDirection(direction)
    if not wastage_factor > 0:
        raise ConfigurationError(f"wastage_factor must be > 0, got {wastage_factor}")

    sqm = coerce_number(sqm, "sqm")
    if sqm <= 0:
        return WastageResult(new_sqm=0.0, new_cartons=0)

    if direction == WastageDirection.ADD:
        new_sqm = round2(sqm * wastage_factor)
    else:
        new_sqm = round2(sqm / wastage_factor)

    return WastageResult(new_sqm=new_sqm, new_cartons=cartons_for_area(new_sqm, coverage_rate))


def toggle_line_wastage(
    line: TileLineItem,
    direction: WastageDirection | str,
    profile: ConfigurationProfile,
) -> TileLineItem:
    """Return a copy of ``line`` with wastage added to or removed from its area."""
    rate = RateResolver(profile).coverage_rate(line.category)
    result = apply_wastage(line.sqm, profile.wastage_factor, direction, rate)
    logger.debug(
        f"Wastage {WastageDirection(direction).value} on '{line.category}': "
        f"{line.sqm} → {result.new_sqm} m², {result.new_cartons} cartons"
    )
    return line.model_copy(update={"sqm": result.new_sqm, "cartons": result.new_cartons})
