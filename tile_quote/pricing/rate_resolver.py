"""
Rate Resolver — decides the unit price and the coverage rate for a line.

Price precedence is an ordered chain of (name, predicate, resolver) rules,
evaluated top to bottom, first match wins:

  1. override:   the caller set a non-zero price; keep it
  2. size_rule:  the (normalized) size matches a size price rule
  3. category:   the category matched a bucket; use the bucket price
  4. fallback:   nothing matched; use the general-floor price

The coverage rate never comes from the price chain: it always follows the
classified bucket (or the general-floor fallback). Size rules are a pricing
convenience only.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple, Optional

from tile_quote.models.enums import CategoryBucket, PriceSource, TileType
from tile_quote.models.schemas import MaterialLineItem, RateResolution, TileLineItem
from tile_quote.pricing.categories import FALLBACK_BUCKET, CategoryRule, match_category
from tile_quote.pricing.profile import ConfigurationProfile, SizePriceRule, normalize_size
from tile_quote.utils.numbers import coerce_number

logger = logging.getLogger(__name__)


class _Context(NamedTuple):
    line: TileLineItem
    rule: Optional[CategoryRule]
    profile: ConfigurationProfile

    @property
    def bucket(self) -> CategoryBucket:
        return self.rule.bucket if self.rule else FALLBACK_BUCKET


class PriceRule(NamedTuple):
    source: PriceSource
    applies: Callable[[_Context], bool]
    price: Callable[[_Context], float]


# ── Rule predicates / resolvers ──────────────────────────


def _is_caller_price(ctx: _Context) -> bool:
    price = coerce_number(ctx.line.unit_price, "unit_price")
    return price > 0 and ctx.line.price_source in (None, PriceSource.OVERRIDE)


def _keep_caller_price(ctx: _Context) -> float:
    return coerce_number(ctx.line.unit_price, "unit_price")


def _effective_size(ctx: _Context) -> str:
    """The line's own size, or the bucket's configured default size."""
    size = normalize_size(ctx.line.size)
    if not size and ctx.rule is not None:
        size = normalize_size(ctx.profile.default_sizes.get(ctx.rule.bucket, ""))
    return size


def _size_rule_for(ctx: _Context) -> Optional[SizePriceRule]:
    size = _effective_size(ctx)
    if not size:
        return None
    for rule in ctx.profile.size_price_rules:
        if rule.normalized_size == size:
            return rule
    return None


def _has_size_rule(ctx: _Context) -> bool:
    return _size_rule_for(ctx) is not None


def _size_rule_price(ctx: _Context) -> float:
    rule = _size_rule_for(ctx)
    return rule.price if rule else 0.0


def _has_category(ctx: _Context) -> bool:
    return ctx.rule is not None


def _bucket_price(ctx: _Context) -> float:
    return ctx.profile.unit_price_for(ctx.bucket)


PRICE_RULES: tuple[PriceRule, ...] = (
    PriceRule(PriceSource.OVERRIDE, _is_caller_price, _keep_caller_price),
    PriceRule(PriceSource.SIZE_RULE, _has_size_rule, _size_rule_price),
    PriceRule(PriceSource.CATEGORY, _has_category, _bucket_price),
    PriceRule(PriceSource.FALLBACK, lambda ctx: True, _bucket_price),
)


# ── Resolver ─────────────────────────────────────────────


class RateResolver:
    """Resolves price and coverage rate for tile lines against one profile."""

    def __init__(self, profile: ConfigurationProfile):
        self.profile = profile

    def coverage_rate(self, category: Optional[str]) -> float:
        """m² per carton for a category (general floor when unmatched)."""
        rule = match_category(category)
        bucket = rule.bucket if rule else FALLBACK_BUCKET
        return self.profile.coverage_rate_for(bucket)

    def resolve(self, line: TileLineItem) -> RateResolution:
        rule = match_category(line.category)
        ctx = _Context(line=line, rule=rule, profile=self.profile)

        # The fallback rule always applies, so next() always finds a match
        unit_price, source = next(
            (r.price(ctx), r.source) for r in PRICE_RULES if r.applies(ctx)
        )

        resolution = RateResolution(
            unit_price=unit_price,
            coverage_rate=self.profile.coverage_rate_for(ctx.bucket),
            bucket=rule.bucket if rule else None,
            price_source=source,
            tile_type=rule.tile_type if rule else TileType.UNKNOWN,
        )
        logger.debug(
            f"Resolved '{line.category}' ({line.size or 'no size'}): "
            f"price={resolution.unit_price} via {source.value}, "
            f"coverage={resolution.coverage_rate} m²/carton"
        )
        return resolution

    def apply(self, line: TileLineItem) -> TileLineItem:
        """Return a copy of ``line`` carrying the resolved price (and tile type if unknown)."""
        resolution = self.resolve(line)
        update: dict = {
            "unit_price": resolution.unit_price,
            "price_source": resolution.price_source,
        }
        if line.tile_type == TileType.UNKNOWN:
            update["tile_type"] = resolution.tile_type
        return line.model_copy(update=update)


class MaterialPriceResolver:
    """
    Default prices for material lines that arrive without one. Keywords are
    tried longest first so "white cement" is never priced as "cement".
    A caller-set price always wins.
    """

    def __init__(self, profile: ConfigurationProfile):
        self.profile = profile
        self._keywords = sorted(profile.material_prices, key=len, reverse=True)

    def default_price(self, item: str) -> Optional[float]:
        name = (item or "").lower()
        for keyword in self._keywords:
            if keyword in name:
                return self.profile.material_prices[keyword]
        # "sand" alone is sold as sharp sand
        if "sand" in name and "sharp sand" in self.profile.material_prices:
            return self.profile.material_prices["sharp sand"]
        return None

    def apply(self, line: MaterialLineItem) -> MaterialLineItem:
        if line.unit_price > 0 and line.price_source in (None, PriceSource.OVERRIDE):
            return line.model_copy(update={"price_source": PriceSource.OVERRIDE})
        price = self.default_price(line.item)
        if price is None:
            return line
        return line.model_copy(update={"unit_price": price, "price_source": PriceSource.CATEGORY})
