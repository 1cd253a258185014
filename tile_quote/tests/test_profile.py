"""
Tests: Configuration profile validation, the app-settings adapter and
the profile store.

Run with:
    pytest tile_quote/tests/test_profile.py -v
"""

import json

import pytest
from pydantic import ValidationError

from tile_quote.models.enums import CategoryBucket
from tile_quote.pricing.profile import (
    ConfigurationError,
    ConfigurationProfile,
    ProfileStore,
    load_profile,
    profile_from_app_settings,
)


class TestConfigurationProfile:
    def test_defaults_cover_every_bucket(self):
        profile = ConfigurationProfile()
        for bucket in CategoryBucket:
            assert profile.coverage_rate_for(bucket) > 0
            assert profile.unit_price_for(bucket) >= 0

    def test_zero_coverage_rate_rejected(self):
        rates = {b.value: 1.5 for b in CategoryBucket}
        rates["kitchen_wall"] = 0
        with pytest.raises(ConfigurationError, match="kitchen_wall"):
            load_profile({"category_coverage_rate": rates})

    def test_missing_bucket_rejected(self):
        with pytest.raises(ConfigurationError, match="coverage rate missing"):
            load_profile({"category_coverage_rate": {"kitchen_wall": 1.5}})

    def test_negative_price_rejected(self):
        prices = {b.value: 5000 for b in CategoryBucket}
        prices["step"] = -1
        with pytest.raises(ConfigurationError):
            load_profile({"category_unit_price": prices})

    def test_negative_size_price_rejected(self):
        with pytest.raises(ConfigurationError):
            load_profile({"size_price_rules": [{"size": "60x60", "price": -5}]})

    @pytest.mark.parametrize("factor", [1.0, 0.9, 0])
    def test_wastage_factor_must_exceed_one(self, factor):
        with pytest.raises(ConfigurationError, match="wastage_factor"):
            load_profile({"wastage_factor": factor})

    def test_negative_tax_rejected(self):
        with pytest.raises(ConfigurationError):
            load_profile({"tax_percentage": -7.5})

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            load_profile({"wastage_factor": 0.5})

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="tax_percentge"):
            load_profile({"tax_percentge": 5})

    def test_profile_is_read_only(self):
        profile = ConfigurationProfile()
        with pytest.raises(ValidationError):
            profile.tax_percentage = 0


class TestAppSettingsAdapter:
    def test_bucket_keys(self):
        profile = profile_from_app_settings({
            "kitchenWallTilePrice": 5800,
            "kitchenWallTileM2PerCarton": 1.44,
            "roomTileM2PerCarton": 2.0,
        })
        assert profile.unit_price_for(CategoryBucket.KITCHEN_WALL) == 5800
        assert profile.coverage_rate_for(CategoryBucket.KITCHEN_WALL) == 1.44
        assert profile.coverage_rate_for(CategoryBucket.BEDROOM) == 2.0
        # untouched buckets keep their defaults
        assert profile.unit_price_for(CategoryBucket.SITTING_ROOM) == 6800

    def test_scalars_and_materials(self):
        profile = profile_from_app_settings({
            "wastageFactor": 1.05,
            "taxPercentage": 5,
            "showTax": True,
            "cementPrice": 11000,
            "workmanshipRate": 2000,
        })
        assert profile.wastage_factor == 1.05
        assert profile.tax_percentage == 5
        assert profile.show_tax is True
        assert profile.material_prices["cement"] == 11000
        assert profile.default_workmanship_rate == 2000

    def test_size_rules_and_default_sizes(self):
        profile = profile_from_app_settings({
            "tilePricesBySize": [{"size": "60x60", "price": 7000}],
            "defaultToiletWallSize": "25x40",
            "defaultSittingRoomSize": "",
        })
        assert [r.size for r in profile.size_price_rules] == ["60x60"]
        assert profile.default_sizes == {CategoryBucket.TOILET_WALL: "25x40"}

    def test_non_pricing_keys_skipped(self):
        profile = profile_from_app_settings({"companyName": "Tiles Ltd", "kitchenWallTilePrice": 9000})
        assert profile.unit_price_for(CategoryBucket.KITCHEN_WALL) == 9000

    def test_profile_style_key_in_export_rejected(self):
        with pytest.raises(ConfigurationError, match="tax_percentge"):
            profile_from_app_settings({"kitchenWallTilePrice": 9000, "tax_percentge": 5})

    def test_invalid_value_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            profile_from_app_settings({"toiletFloorTileM2PerCarton": 0})


class TestProfileStore:
    def test_no_path_uses_defaults(self):
        assert ProfileStore(profile_path="").get_profile() == ConfigurationProfile()

    def test_loads_profile_file(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"tax_percentage": 10, "show_tax": True}))
        profile = ProfileStore(profile_path=str(path)).get_profile()
        assert profile.tax_percentage == 10
        assert profile.show_tax is True

    def test_detects_app_settings_export(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"stepTileM2PerCarton": 0.9, "stepTilePrice": 4000}))
        profile = ProfileStore(profile_path=str(path)).get_profile()
        assert profile.coverage_rate_for(CategoryBucket.STEP) == 0.9
        assert profile.unit_price_for(CategoryBucket.STEP) == 4000

    def test_export_without_coverage_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"kitchenWallTilePrice": 9000, "taxPercentage": 5}))
        profile = ProfileStore(profile_path=str(path)).get_profile()
        assert profile.unit_price_for(CategoryBucket.KITCHEN_WALL) == 9000
        assert profile.tax_percentage == 5

    def test_misspelt_key_is_fatal(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"kitchenWallTilePrice": 9000, "tax_percentge": 5}))
        with pytest.raises(ConfigurationError, match="tax_percentge"):
            ProfileStore(profile_path=str(path)).get_profile()

    def test_misspelt_profile_field_is_fatal(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"wastage_factr": 1.2}))
        with pytest.raises(ConfigurationError, match="wastage_factr"):
            ProfileStore(profile_path=str(path)).get_profile()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ProfileStore(profile_path=str(tmp_path / "nope.json")).get_profile()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            ProfileStore(profile_path=str(path)).get_profile()

    def test_non_object(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            ProfileStore(profile_path=str(path)).get_profile()

    def test_cached_until_reload(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"tax_percentage": 10}))
        store = ProfileStore(profile_path=str(path))
        assert store.get_profile().tax_percentage == 10

        path.write_text(json.dumps({"tax_percentage": 12}))
        assert store.get_profile().tax_percentage == 10
        assert store.reload().tax_percentage == 12
