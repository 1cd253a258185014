"""
Configuration Profile — the immutable snapshot of pricing and coverage
rules every resolution/aggregation call receives explicitly.

Validated once at load time: a non-positive coverage rate or a missing
bucket is a ConfigurationError, raised before any calculation can divide
by it. Falls back to built-in defaults when no profile file is configured.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from tile_quote.config import get_settings
from tile_quote.models.enums import CategoryBucket

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """The profile cannot be used for calculation (fatal, raised at load time)."""


# ── Defaults (NGN) ───────────────────────────────────────

DEFAULT_CATEGORY_PRICES: dict[CategoryBucket, float] = {
    CategoryBucket.SITTING_ROOM: 6800.0,
    CategoryBucket.BEDROOM: 6500.0,
    CategoryBucket.TOILET_WALL: 5600.0,
    CategoryBucket.TOILET_FLOOR: 6500.0,
    CategoryBucket.KITCHEN_WALL: 5600.0,
    CategoryBucket.KITCHEN_FLOOR: 6500.0,
    CategoryBucket.EXTERNAL_WALL: 6500.0,
    CategoryBucket.STEP: 6500.0,
    CategoryBucket.GENERAL_WALL: 5600.0,
    CategoryBucket.GENERAL_FLOOR: 6500.0,
}

DEFAULT_COVERAGE_RATES: dict[CategoryBucket, float] = {
    bucket: 1.5 for bucket in CategoryBucket
}

DEFAULT_SIZE_RULES: list[dict[str, Any]] = [
    {"size": "60x60", "price": 6500.0},
    {"size": "30x60", "price": 5600.0},
    {"size": "40x40", "price": 5000.0},
    {"size": "30x30", "price": 4500.0},
    {"size": "60x120", "price": 12000.0},
    {"size": "25x40", "price": 5600.0},
]

DEFAULT_MATERIAL_PRICES: dict[str, float] = {
    "white cement": 15000.0,
    "cement": 10000.0,
    "sharp sand": 50000.0,
}


# ── Profile models ───────────────────────────────────────


_SIZE_SEPARATORS = re.compile(r"\s*(?:x|by|\*|×)\s*")
_SIZE_UNITS = re.compile(r"\s*(?:cm|mm)\b")


def normalize_size(size: Optional[str]) -> str:
    """
    Canonical form of a tile size token: "60 by 60", "60 X 60cm" and
    "60×60" all become "60x60". Returns "" for empty input.
    """
    text = (size or "").strip().lower()
    if not text:
        return ""
    text = _SIZE_UNITS.sub("", text)
    text = _SIZE_SEPARATORS.sub("x", text)
    return re.sub(r"\s+", "", text)


class SizePriceRule(BaseModel):
    """A size-based price: any tile of this size costs ``price`` per carton."""
    model_config = ConfigDict(frozen=True)

    size: str
    price: float

    @field_validator("price")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"size price must be >= 0, got {v}")
        return v

    @property
    def normalized_size(self) -> str:
        return normalize_size(self.size)


class ConfigurationProfile(BaseModel):
    """Pricing/coverage rules and defaults for one calculation run (read-only)."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    category_unit_price: dict[CategoryBucket, float] = DEFAULT_CATEGORY_PRICES
    category_coverage_rate: dict[CategoryBucket, float] = DEFAULT_COVERAGE_RATES
    size_price_rules: tuple[SizePriceRule, ...] = tuple(SizePriceRule(**r) for r in DEFAULT_SIZE_RULES)
    default_sizes: dict[CategoryBucket, str] = {}
    material_prices: dict[str, float] = DEFAULT_MATERIAL_PRICES

    wastage_factor: float = 1.10
    tax_percentage: float = 7.5
    default_deposit_percentage: float = 50.0
    default_workmanship_rate: float = 1700.0
    default_maintenance: float = 0.0

    # Visibility defaults applied when a document leaves a flag unset
    show_tax: bool = False
    show_maintenance: bool = True
    show_materials_default: bool = True
    show_adjustments_default: bool = True

    @model_validator(mode="after")
    def _check_invariants(self) -> "ConfigurationProfile":
        missing = [b.value for b in CategoryBucket if b not in self.category_coverage_rate]
        if missing:
            raise ValueError(f"coverage rate missing for buckets: {', '.join(missing)}")
        missing = [b.value for b in CategoryBucket if b not in self.category_unit_price]
        if missing:
            raise ValueError(f"unit price missing for buckets: {', '.join(missing)}")

        for bucket, rate in self.category_coverage_rate.items():
            if not rate > 0:
                raise ValueError(f"coverage rate for {bucket.value} must be > 0, got {rate}")
        for bucket, price in self.category_unit_price.items():
            if price < 0:
                raise ValueError(f"unit price for {bucket.value} must be >= 0, got {price}")
        for item, price in self.material_prices.items():
            if price < 0:
                raise ValueError(f"material price for '{item}' must be >= 0, got {price}")

        if not self.wastage_factor > 1:
            raise ValueError(f"wastage_factor must be > 1, got {self.wastage_factor}")
        for name in ("tax_percentage", "default_deposit_percentage",
                     "default_workmanship_rate", "default_maintenance"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        return self

    def coverage_rate_for(self, bucket: CategoryBucket) -> float:
        return self.category_coverage_rate[bucket]

    def unit_price_for(self, bucket: CategoryBucket) -> float:
        return self.category_unit_price[bucket]


def load_profile(data: dict[str, Any]) -> ConfigurationProfile:
    """Validate ``data`` into a profile, raising ConfigurationError on any problem."""
    try:
        return ConfigurationProfile(**data)
    except ValidationError as e:
        logger.error(f"Invalid configuration profile: {e}")
        raise ConfigurationError(str(e)) from e


# ── Application settings adapter ─────────────────────────

# camelCase keys of the application's settings document, per bucket
_APP_PRICE_KEYS: dict[CategoryBucket, str] = {
    CategoryBucket.SITTING_ROOM: "sittingRoomTilePrice",
    CategoryBucket.BEDROOM: "bedroomTilePrice",
    CategoryBucket.TOILET_WALL: "toiletWallTilePrice",
    CategoryBucket.TOILET_FLOOR: "toiletFloorTilePrice",
    CategoryBucket.KITCHEN_WALL: "kitchenWallTilePrice",
    CategoryBucket.KITCHEN_FLOOR: "kitchenFloorTilePrice",
    CategoryBucket.EXTERNAL_WALL: "externalWallTilePrice",
    CategoryBucket.STEP: "stepTilePrice",
    CategoryBucket.GENERAL_WALL: "wallTilePrice",
    CategoryBucket.GENERAL_FLOOR: "floorTilePrice",
}

_APP_COVERAGE_KEYS: dict[CategoryBucket, str] = {
    CategoryBucket.SITTING_ROOM: "sittingRoomTileM2PerCarton",
    CategoryBucket.BEDROOM: "roomTileM2PerCarton",
    CategoryBucket.TOILET_WALL: "toiletWallTileM2PerCarton",
    CategoryBucket.TOILET_FLOOR: "toiletFloorTileM2PerCarton",
    CategoryBucket.KITCHEN_WALL: "kitchenWallTileM2PerCarton",
    CategoryBucket.KITCHEN_FLOOR: "kitchenFloorTileM2PerCarton",
    CategoryBucket.EXTERNAL_WALL: "externalWallTileM2PerCarton",
    CategoryBucket.STEP: "stepTileM2PerCarton",
    CategoryBucket.GENERAL_WALL: "wallTileM2PerCarton",
    CategoryBucket.GENERAL_FLOOR: "floorTileM2PerCarton",
}

_APP_SIZE_KEYS: dict[CategoryBucket, str] = {
    CategoryBucket.TOILET_WALL: "defaultToiletWallSize",
    CategoryBucket.TOILET_FLOOR: "defaultToiletFloorSize",
    CategoryBucket.BEDROOM: "defaultRoomFloorSize",
    CategoryBucket.SITTING_ROOM: "defaultSittingRoomSize",
    CategoryBucket.KITCHEN_WALL: "defaultKitchenWallSize",
    CategoryBucket.KITCHEN_FLOOR: "defaultKitchenFloorSize",
}

_APP_MATERIAL_KEYS: dict[str, str] = {
    "white cement": "whiteCementPrice",
    "cement": "cementPrice",
    "sharp sand": "sharpSandPrice",
}

_APP_SCALAR_KEYS: dict[str, str] = {
    "wastageFactor": "wastage_factor",
    "taxPercentage": "tax_percentage",
    "defaultDepositPercentage": "default_deposit_percentage",
    "workmanshipRate": "default_workmanship_rate",
    "showTax": "show_tax",
    "showMaintenance": "show_maintenance",
    "showMaterialsDefault": "show_materials_default",
    "showAdjustmentsDefault": "show_adjustments_default",
}

_APP_KEYS = frozenset(
    [*_APP_PRICE_KEYS.values(), *_APP_COVERAGE_KEYS.values(), *_APP_SIZE_KEYS.values(),
     *_APP_MATERIAL_KEYS.values(), *_APP_SCALAR_KEYS, "tilePricesBySize"]
)

_CAMEL_KEY = re.compile(r"^[a-z]+[A-Z]")


def is_app_settings(data: dict[str, Any]) -> bool:
    """True when ``data`` is the application's camelCase settings export."""
    return any(key in _APP_KEYS or _CAMEL_KEY.match(str(key)) for key in data)


def profile_from_app_settings(settings: dict[str, Any]) -> ConfigurationProfile:
    """
    Build a profile from the application's flat settings document
    (``kitchenWallTilePrice``, ``kitchenWallTileM2PerCarton``,
    ``tilePricesBySize``...). Keys that are absent keep their defaults;
    present but invalid values raise ConfigurationError. Other camelCase keys
    (company details, UI preferences) are not pricing settings and are
    skipped, but a snake_case key means a profile field was mixed into the
    export and is rejected.
    """
    mixed = sorted(str(key) for key in settings if "_" in str(key))
    if mixed:
        logger.error(f"Settings export contains profile-style keys: {mixed}")
        raise ConfigurationError(
            f"Unexpected keys in application settings: {', '.join(mixed)}"
        )

    data: dict[str, Any] = {}

    prices = dict(DEFAULT_CATEGORY_PRICES)
    for bucket, key in _APP_PRICE_KEYS.items():
        if key in settings:
            prices[bucket] = settings[key]
    data["category_unit_price"] = prices

    rates = dict(DEFAULT_COVERAGE_RATES)
    for bucket, key in _APP_COVERAGE_KEYS.items():
        if key in settings:
            rates[bucket] = settings[key]
    data["category_coverage_rate"] = rates

    if "tilePricesBySize" in settings:
        data["size_price_rules"] = tuple(settings.get("tilePricesBySize") or ())

    data["default_sizes"] = {
        bucket: settings[key]
        for bucket, key in _APP_SIZE_KEYS.items()
        if settings.get(key)
    }

    materials = dict(DEFAULT_MATERIAL_PRICES)
    for item, key in _APP_MATERIAL_KEYS.items():
        if key in settings:
            materials[item] = settings[key]
    data["material_prices"] = materials

    for app_key, field in _APP_SCALAR_KEYS.items():
        if app_key in settings:
            data[field] = settings[app_key]

    return load_profile(data)


# ── Store ────────────────────────────────────────────────


class ProfileStore:
    """
    Loads the configuration profile from the JSON file named by
    ``Settings.profile_path``, or uses built-in defaults when none is set.
    Cached after first load for the lifetime of the process.
    """

    def __init__(self, profile_path: Optional[str] = None):
        self.settings = get_settings()
        self.profile_path = profile_path if profile_path is not None else self.settings.profile_path
        self._cache: Optional[ConfigurationProfile] = None

    def _read(self) -> ConfigurationProfile:
        if not self.profile_path:
            logger.info("No profile_path configured, using default pricing profile")
            return ConfigurationProfile()

        path = Path(self.profile_path)
        if not path.exists():
            raise ConfigurationError(f"Profile file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Profile file {path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Profile file {path} must contain a JSON object")

        if is_app_settings(data):
            profile = profile_from_app_settings(data)
        else:
            profile = load_profile(data)
        logger.info(f"Loaded pricing profile from {path}")
        return profile

    def get_profile(self) -> ConfigurationProfile:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def reload(self) -> ConfigurationProfile:
        """Force cache invalidation + re-read."""
        self._cache = None
        return self.get_profile()
