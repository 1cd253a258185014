"""
Pricing — the deterministic calculation engine.

Services and the API import from this package:
    from tile_quote.pricing import RateResolver, TotalsAggregator

Every entry point takes the ConfigurationProfile explicitly; nothing here
reads global state or performs I/O (apart from ProfileStore loading).
"""

from .categories import CATEGORY_RULES, classify_category
from .line_cost import line_cost
from .profile import (
    ConfigurationError,
    ConfigurationProfile,
    ProfileStore,
    SizePriceRule,
    load_profile,
    normalize_size,
    profile_from_app_settings,
)
from .rate_resolver import MaterialPriceResolver, RateResolver
from .reconciler import QuantityReconciler, quantity_from_line, reconcile
from .totals import TotalsAggregator, calculate_totals
from .wastage import apply_wastage, toggle_line_wastage

__all__ = [
    "CATEGORY_RULES",
    "classify_category",
    "line_cost",
    "ConfigurationError",
    "ConfigurationProfile",
    "ProfileStore",
    "SizePriceRule",
    "load_profile",
    "normalize_size",
    "profile_from_app_settings",
    "MaterialPriceResolver",
    "RateResolver",
    "QuantityReconciler",
    "quantity_from_line",
    "reconcile",
    "TotalsAggregator",
    "calculate_totals",
    "apply_wastage",
    "toggle_line_wastage",
]
