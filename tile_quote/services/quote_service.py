"""
Quote Service — runs a whole document through the pricing engine.

Pure read → compute → return: documents handed in are never mutated;
every method returns an updated copy. Totals are recomputed from scratch
on every call, so they can never drift from the document they describe.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, TypeVar

from tile_quote.models.enums import WastageDirection
from tile_quote.models.schemas import PricedDocument, TotalsSummary
from tile_quote.pricing.profile import ConfigurationProfile
from tile_quote.pricing.rate_resolver import MaterialPriceResolver, RateResolver
from tile_quote.pricing.reconciler import QuantityEdit, QuantityReconciler
from tile_quote.pricing.totals import TotalsAggregator
from tile_quote.pricing.wastage import toggle_line_wastage

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=PricedDocument)


class QuoteService:
    """Prices documents line by line and totals them against one profile."""

    def __init__(self, profile: ConfigurationProfile):
        self.profile = profile
        self.rates = RateResolver(profile)
        self.quantities = QuantityReconciler(profile)
        self.materials = MaterialPriceResolver(profile)
        self.aggregator = TotalsAggregator(profile)

    def price_document(
        self,
        document: D,
        driving: Optional[Mapping[int, QuantityEdit]] = None,
    ) -> D:
        """
        Resolve price and reconcile quantities for every tile line, and fill
        default prices for unpriced material lines.

        ``driving`` maps tile line indexes to the quantity edit that drives
        them; lines without an entry use the area-first intake rule.
        """
        driving = driving or {}
        tiles = []
        for index, line in enumerate(document.tiles):
            line = self.quantities.reconcile_line(line, driving.get(index))
            tiles.append(self.rates.apply(line))
        materials = [self.materials.apply(m) for m in document.materials]

        logger.info(
            f"Priced document: {len(tiles)} tile lines, {len(materials)} material lines"
        )
        return document.model_copy(update={"tiles": tiles, "materials": materials})

    def edit_tile_line(self, document: D, index: int, quantity: QuantityEdit) -> D:
        """Apply one edit event (area or cartons changed) to tile line ``index``."""
        tiles = list(document.tiles)
        if not 0 <= index < len(tiles):
            raise IndexError(f"No tile line at index {index} (document has {len(tiles)})")
        line = self.quantities.reconcile_line(tiles[index], quantity)
        tiles[index] = self.rates.apply(line)
        return document.model_copy(update={"tiles": tiles})

    def toggle_wastage(self, document: D, index: int, direction: WastageDirection | str) -> D:
        """Add or remove wastage on tile line ``index``."""
        tiles = list(document.tiles)
        if not 0 <= index < len(tiles):
            raise IndexError(f"No tile line at index {index} (document has {len(tiles)})")
        tiles[index] = toggle_line_wastage(tiles[index], direction, self.profile)
        return document.model_copy(update={"tiles": tiles})

    def totals(self, document: PricedDocument) -> TotalsSummary:
        return self.aggregator.aggregate(document)
