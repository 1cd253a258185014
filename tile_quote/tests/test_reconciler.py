"""
Tests: Area ↔ carton reconciliation.

Run with:
    pytest tile_quote/tests/test_reconciler.py -v
"""

import pytest

from tile_quote.models.enums import QuantityKind
from tile_quote.models.schemas import FromArea, FromCartons, TileLineItem, Unspecified
from tile_quote.pricing.profile import ConfigurationError
from tile_quote.pricing.reconciler import (
    QuantityReconciler,
    area_for_cartons,
    cartons_for_area,
    quantity_from_line,
    reconcile,
)


class TestCartonsForArea:
    def test_rounds_up(self):
        # 95 / 1.5 = 63.33 → 64
        assert cartons_for_area(95, 1.5) == 64

    def test_exact_division_unchanged(self):
        assert cartons_for_area(3.0, 1.5) == 2
        assert cartons_for_area(4.5, 1.5) == 3

    def test_float_noise_is_not_a_partial_carton(self):
        # 0.3 / 0.1 evaluates to 2.9999999999999996
        assert cartons_for_area(0.3, 0.1) == 3
        assert cartons_for_area(4.32, 1.44) == 3

    @pytest.mark.parametrize("sqm,rate", [(0.01, 1.5), (10, 1.44), (95, 1.5), (123.45, 2.16)])
    def test_smallest_sufficient_count(self, sqm, rate):
        cartons = cartons_for_area(sqm, rate)
        assert cartons * rate >= sqm
        assert (cartons - 1) * rate < sqm

    def test_zero_area(self):
        assert cartons_for_area(0, 1.5) == 0

    def test_non_positive_rate_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            cartons_for_area(10, 0)


class TestAreaForCartons:
    def test_rounded_to_two_places(self):
        assert area_for_cartons(7, 1.44) == 10.08
        assert area_for_cartons(3, 1.333) == 4.0

    @pytest.mark.parametrize("rate", [1.5, 1.44, 2.16, 0.72])
    def test_cartons_round_trip_is_stable(self, rate):
        """cartons → sqm → cartons reproduces the carton count."""
        for cartons in (1, 3, 17, 64, 250):
            assert cartons_for_area(area_for_cartons(cartons, rate), rate) == cartons


class TestReconcile:
    def test_area_drives(self):
        result = reconcile(FromArea(sqm=95), 1.5)
        assert result.sqm == 95
        assert result.cartons == 64
        assert result.driving == QuantityKind.FROM_AREA

    def test_cartons_drive(self):
        result = reconcile(FromCartons(cartons=10), 1.5)
        assert result.sqm == 15.0
        assert result.cartons == 10
        assert result.driving == QuantityKind.FROM_CARTONS

    def test_partial_cartons_round_up(self):
        assert reconcile(FromCartons(cartons=2.2), 1.5).cartons == 3

    def test_unspecified_invents_nothing(self):
        result = reconcile(Unspecified(), 1.5)
        assert (result.sqm, result.cartons) == (0.0, 0)
        assert result.driving == QuantityKind.UNSPECIFIED

    def test_garbage_area_is_zero(self):
        result = reconcile(FromArea(sqm="abc"), 1.5)
        assert (result.sqm, result.cartons) == (0.0, 0)
        assert result.driving == QuantityKind.FROM_AREA

    def test_negative_cartons_are_zero(self):
        result = reconcile(FromCartons(cartons=-4), 1.5)
        assert (result.sqm, result.cartons) == (0.0, 0)

    def test_bad_rate_raises_even_without_quantity(self):
        with pytest.raises(ConfigurationError):
            reconcile(Unspecified(), -1)


class TestQuantityFromLine:
    def test_area_wins(self):
        line = TileLineItem(sqm=12, cartons=99)
        assert quantity_from_line(line) == FromArea(sqm=12)

    def test_cartons_when_no_area(self):
        assert quantity_from_line(TileLineItem(cartons=4)) == FromCartons(cartons=4)

    def test_nothing(self):
        assert quantity_from_line(TileLineItem()) == Unspecified()


class TestQuantityReconciler:
    def test_area_edit_discards_stale_cartons(self, profile):
        line = TileLineItem(category="Kitchen Wall", sqm=30, cartons=99)
        updated = QuantityReconciler(profile).reconcile_line(line, FromArea(sqm=30))
        assert updated.cartons == 20
        assert line.cartons == 99

    def test_carton_edit(self, profile):
        line = TileLineItem(category="Kitchen Wall", sqm=30, cartons=20)
        updated = QuantityReconciler(profile).reconcile_line(line, FromCartons(cartons=25))
        assert updated.sqm == 37.5
        assert updated.cartons == 25

    def test_without_edit_uses_area_first(self, profile):
        line = TileLineItem(category="Bedroom", sqm=10, cartons=1)
        updated = QuantityReconciler(profile).reconcile_line(line)
        assert updated.cartons == 7
