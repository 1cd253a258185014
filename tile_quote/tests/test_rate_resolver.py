"""
Tests: Category classification and rate resolution.

Run with:
    pytest tile_quote/tests/test_rate_resolver.py -v
"""

import pytest

from tile_quote.models.enums import CategoryBucket, PriceSource, TileType
from tile_quote.models.schemas import MaterialLineItem, TileLineItem
from tile_quote.pricing.categories import classify_category
from tile_quote.pricing.profile import load_profile, normalize_size, profile_from_app_settings
from tile_quote.pricing.rate_resolver import MaterialPriceResolver, RateResolver


class TestClassifyCategory:
    @pytest.mark.parametrize("category,bucket", [
        ("Kitchen Wall", CategoryBucket.KITCHEN_WALL),
        ("kitchen floor", CategoryBucket.KITCHEN_FLOOR),
        ("TW", CategoryBucket.TOILET_WALL),
        ("Bathroom Wall", CategoryBucket.TOILET_WALL),
        ("Toilet Floor", CategoryBucket.TOILET_FLOOR),
        ("External wall", CategoryBucket.EXTERNAL_WALL),
        ("Staircase", CategoryBucket.STEP),
        ("Living Room", CategoryBucket.SITTING_ROOM),
        ("Master Bedroom", CategoryBucket.BEDROOM),
        ("Store", CategoryBucket.BEDROOM),
        ("Corridor Wall", CategoryBucket.GENERAL_WALL),
        ("Balcony floor", CategoryBucket.GENERAL_FLOOR),
    ])
    def test_buckets(self, category, bucket):
        assert classify_category(category) == bucket

    def test_unmatched_is_none(self):
        assert classify_category("Unrecognized Blob") is None

    def test_empty_is_none(self):
        assert classify_category("") is None
        assert classify_category(None) is None


class TestNormalizeSize:
    @pytest.mark.parametrize("raw", ["60x60", "60 X 60", "60 by 60", "60×60cm", " 60*60 "])
    def test_variants(self, raw):
        assert normalize_size(raw) == "60x60"

    def test_empty(self):
        assert normalize_size("") == ""
        assert normalize_size(None) == ""


class TestRateResolver:
    def test_category_price_and_coverage(self, profile):
        """Kitchen wall resolves to the bucket's price and coverage rate."""
        resolution = RateResolver(profile).resolve(TileLineItem(category="Kitchen Wall", sqm=95))
        assert resolution.unit_price == 5600
        assert resolution.coverage_rate == 1.5
        assert resolution.bucket == CategoryBucket.KITCHEN_WALL
        assert resolution.price_source == PriceSource.CATEGORY
        assert resolution.tile_type == TileType.WALL

    def test_unrecognized_category_falls_back(self, profile):
        resolution = RateResolver(profile).resolve(
            TileLineItem(category="Unrecognized Blob", sqm=10)
        )
        assert resolution.price_source == PriceSource.FALLBACK
        assert resolution.bucket is None
        assert resolution.unit_price == profile.unit_price_for(CategoryBucket.GENERAL_FLOOR)
        assert resolution.coverage_rate == profile.coverage_rate_for(CategoryBucket.GENERAL_FLOOR)

    def test_empty_category_falls_back(self, profile):
        resolution = RateResolver(profile).resolve(TileLineItem())
        assert resolution.price_source == PriceSource.FALLBACK
        assert resolution.unit_price == 6500

    def test_size_rule_beats_category(self, sixty_only_profile):
        """Sitting room is 6800 by category, but a 60x60 tile is 6500."""
        line = TileLineItem(category="Sitting Room", size="60 x 60")
        resolution = RateResolver(sixty_only_profile).resolve(line)
        assert resolution.unit_price == 6500
        assert resolution.price_source == PriceSource.SIZE_RULE
        assert resolution.coverage_rate == 1.5

    def test_unknown_size_uses_category(self, sixty_only_profile):
        line = TileLineItem(category="Sitting Room", size="45x90")
        resolution = RateResolver(sixty_only_profile).resolve(line)
        assert resolution.unit_price == 6800
        assert resolution.price_source == PriceSource.CATEGORY

    def test_explicit_price_wins_over_size_rule(self, sixty_only_profile):
        line = TileLineItem(category="Sitting Room", size="60x60", unit_price=9999)
        resolution = RateResolver(sixty_only_profile).resolve(line)
        assert resolution.unit_price == 9999
        assert resolution.price_source == PriceSource.OVERRIDE

    def test_resolved_price_is_rederived(self, sixty_only_profile):
        """A price the resolver set earlier is not mistaken for an override."""
        line = TileLineItem(
            category="Sitting Room", size="45x90",
            unit_price=6500, price_source=PriceSource.SIZE_RULE,
        )
        resolution = RateResolver(sixty_only_profile).resolve(line)
        assert resolution.unit_price == 6800
        assert resolution.price_source == PriceSource.CATEGORY

    def test_size_rule_never_changes_coverage(self):
        profile = load_profile({
            "category_coverage_rate": {b.value: 1.44 for b in CategoryBucket},
            "size_price_rules": [{"size": "60x60", "price": 6500}],
        })
        resolution = RateResolver(profile).resolve(TileLineItem(category="Bedroom", size="60x60"))
        assert resolution.coverage_rate == 1.44

    def test_default_size_applies_when_line_has_none(self):
        profile = profile_from_app_settings({
            "defaultSittingRoomSize": "60x60",
            "tilePricesBySize": [{"size": "60x60", "price": 6000}],
        })
        resolution = RateResolver(profile).resolve(TileLineItem(category="Sitting Room"))
        assert resolution.unit_price == 6000
        assert resolution.price_source == PriceSource.SIZE_RULE

    def test_apply_sets_tile_type_only_when_unknown(self, profile):
        resolver = RateResolver(profile)
        assert resolver.apply(TileLineItem(category="Kitchen Floor")).tile_type == TileType.FLOOR
        kept = resolver.apply(TileLineItem(category="Kitchen Floor", tile_type="Wall"))
        assert kept.tile_type == TileType.WALL

    def test_apply_does_not_mutate(self, profile):
        line = TileLineItem(category="Kitchen Wall", sqm=95)
        priced = RateResolver(profile).apply(line)
        assert priced.unit_price == 5600
        assert line.unit_price == 0
        assert line.price_source is None


class TestMaterialPriceResolver:
    def test_longest_keyword_first(self, profile):
        resolver = MaterialPriceResolver(profile)
        assert resolver.default_price("White Cement") == 15000
        assert resolver.default_price("Cement (Dangote)") == 10000

    def test_bare_sand_is_sharp_sand(self, profile):
        assert MaterialPriceResolver(profile).default_price("Sand") == 50000

    def test_unknown_item(self, profile):
        line = MaterialLineItem(item="Tile grout", quantity=4)
        assert MaterialPriceResolver(profile).apply(line) == line

    def test_caller_price_kept(self, profile):
        line = MaterialLineItem(item="Cement", quantity=10, unit_price=9500)
        priced = MaterialPriceResolver(profile).apply(line)
        assert priced.unit_price == 9500
        assert priced.price_source == PriceSource.OVERRIDE

    def test_default_price_filled(self, profile):
        priced = MaterialPriceResolver(profile).apply(MaterialLineItem(item="Cement", quantity=10))
        assert priced.unit_price == 10000
        assert priced.price_source == PriceSource.CATEGORY
