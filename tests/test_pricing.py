"""Unit tests for the fare engine."""

import math

import pytest

from autometer.domain.pricing import (
    MAX_DISTANCE_KM,
    DayFare,
    FareEngine,
    NightFare,
    clamp_distance,
    format_amount,
    round_fare,
)
from autometer.domain.tariff import DEFAULT_TARIFF, TariffConfiguration


class TestFareStrategies:
    def test_day_has_no_surcharge(self):
        assert DayFare().surcharge(82.5) == 0.0

    def test_night_adds_half_the_subtotal(self):
        assert NightFare().surcharge(82.5) == 41.25

    def test_strategy_selection(self):
        assert isinstance(FareEngine.strategy_for(True), NightFare)
        assert isinstance(FareEngine.strategy_for(False), DayFare)


class TestRounding:
    def test_ties_go_up(self):
        assert round_fare(37.5) == 38
        assert round_fare(38.5) == 39  # banker's rounding would give 38

    def test_nearest(self):
        assert round_fare(123.75) == 124
        assert round_fare(45.49) == 45

    def test_format_amount(self):
        assert format_amount(38) == "₹38.00"
        assert format_amount(7.5, "Rs ") == "Rs 7.50"


class TestClampDistance:
    @pytest.mark.parametrize("raw", [-1.0, math.nan, math.inf, None, "abc"])
    def test_bad_values_become_zero(self, raw):
        assert clamp_distance(raw) == 0.0

    def test_valid_value_passes(self):
        assert clamp_distance(2.25) == 2.25

    def test_huge_value_is_capped(self):
        assert clamp_distance(1e307) == MAX_DISTANCE_KM


class TestFareEngine:
    def setup_method(self):
        self.engine = FareEngine()

    # ── Reference scenarios ───────────────────────────────────────

    def test_two_km_by_day(self):
        assert self.engine.compute_fare(2.0, False, DEFAULT_TARIFF) == 38

    def test_five_km_by_night(self):
        assert self.engine.compute_fare(5.0, True, DEFAULT_TARIFF) == 124

    def test_zero_distance_at_night_charges_surcharged_base(self):
        assert self.engine.compute_fare(0.0, True, DEFAULT_TARIFF) == 45

    def test_zero_distance_by_day_is_base_fare(self):
        assert self.engine.compute_fare(0.0, False, DEFAULT_TARIFF) == 30

    def test_within_base_distance_is_base_fare(self):
        assert self.engine.compute_fare(1.5, False, DEFAULT_TARIFF) == 30
        assert self.engine.compute_fare(1.2, False, DEFAULT_TARIFF) == 30

    # ── Input handling ────────────────────────────────────────────

    def test_invalid_tariff_falls_back_to_default(self):
        bad = TariffConfiguration(base_fare=0, base_distance_km=1.5, rate_per_km=15)
        assert self.engine.compute_fare(2.0, False, bad) == 38

    def test_missing_tariff_uses_default(self):
        assert self.engine.compute_fare(2.0, False) == 38

    def test_negative_distance_is_clamped(self):
        assert self.engine.compute_fare(-3.0, False, DEFAULT_TARIFF) == 30

    def test_nan_distance_is_clamped(self):
        assert self.engine.compute_fare(math.nan, True, DEFAULT_TARIFF) == 45

    def test_custom_default_tariff(self):
        engine = FareEngine(TariffConfiguration(25, 1.0, 10))
        assert engine.compute_fare(3.0, False) == 45

    def test_configured_base_distance_cap_is_honoured(self):
        wide = TariffConfiguration(50, 15, 20)
        assert FareEngine(max_base_distance_km=20).compute_fare(2.0, False, wide) == 50
        assert FareEngine().compute_fare(2.0, False, wide) == 38

    def test_huge_distance_does_not_raise(self):
        fare = self.engine.compute_fare(1e307, True, DEFAULT_TARIFF)
        assert fare == self.engine.compute_fare(MAX_DISTANCE_KM, True, DEFAULT_TARIFF)

    def test_overflowing_tariff_falls_back_to_default(self):
        huge = TariffConfiguration(1e308, 1.5, 1e308)
        assert self.engine.compute_fare(5.0, True, huge) == 124

    # ── Properties ────────────────────────────────────────────────

    @pytest.mark.parametrize("d", [0.0, 0.7, 1.5, 1.51, 2.0, 3.33, 10.0, 42.195])
    def test_day_formula(self, d):
        t = TariffConfiguration(28, 1.25, 13.5)
        expected = round_fare(t.base_fare + t.rate_per_km * max(0.0, d - t.base_distance_km))
        assert self.engine.compute_fare(d, False, t) == expected

    @pytest.mark.parametrize("d", [0.0, 1.0, 2.0, 4.4, 5.0, 12.3])
    def test_night_surcharge_applies_before_rounding(self, d):
        t = DEFAULT_TARIFF
        unrounded = t.base_fare + t.rate_per_km * max(0.0, d - t.base_distance_km)
        assert self.engine.compute_fare(d, True, t) == round_fare(1.5 * unrounded)

    @pytest.mark.parametrize("night", [False, True])
    def test_monotonic_in_distance(self, night):
        fares = [
            self.engine.compute_fare(i * 0.05, night, DEFAULT_TARIFF) for i in range(400)
        ]
        assert fares == sorted(fares)

    def test_result_is_non_negative_int(self):
        fare = self.engine.compute_fare(7.77, True, DEFAULT_TARIFF)
        assert isinstance(fare, int)
        assert fare >= 0


class TestFareBreakdown:
    def setup_method(self):
        self.engine = FareEngine()

    def test_day_breakdown_components(self):
        b = self.engine.breakdown(5.0, False, DEFAULT_TARIFF)
        assert b.base_fare_amount == 30
        assert b.additional_distance_km == 3.5
        assert b.additional_fare_amount == 52.5
        assert b.subtotal == 82.5
        assert b.night_surcharge_amount == 0
        assert b.total == 83  # 82.5 rounds up

    def test_night_breakdown_components(self):
        b = self.engine.breakdown(5.0, True, DEFAULT_TARIFF)
        assert b.night_surcharge_amount == 41.25
        assert b.total == 124

    def test_short_trip_has_no_additional_distance(self):
        b = self.engine.breakdown(1.0, False, DEFAULT_TARIFF)
        assert b.additional_distance_km == 0
        assert b.additional_fare_amount == 0

    @pytest.mark.parametrize("d", [0.0, 1.7, 2.0, 3.3333, 5.0, 9.99])
    @pytest.mark.parametrize("night", [False, True])
    def test_total_matches_compute_fare(self, d, night):
        t = TariffConfiguration(30.4, 1.5, 15.3)
        b = self.engine.breakdown(d, night, t)
        assert b.total == self.engine.compute_fare(d, night, t)
        assert b.total == round_fare(
            b.base_fare_amount + b.additional_fare_amount + b.night_surcharge_amount
        )
