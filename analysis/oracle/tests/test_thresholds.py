"""Tests for the Oracle threshold engine."""

import numpy as np
import pytest

from oracle.thresholds import (
    adaptive_band_at,
    adaptive_bands,
    check_static_deviation,
    static_band,
    volatility_factor,
)
from shared import PricePoint, ThresholdBand, TriggerPoint


def series_from_oracles(oracles: list[float]) -> list[PricePoint]:
    return [
        PricePoint(t=i * 1000, ref=o, oracle=o)
        for i, o in enumerate(oracles)
    ]


class TestStaticBand:
    """Test suite for the static threshold band."""

    def test_empty_series(self):
        """Test empty series gives a zero band."""
        assert static_band([]) == ThresholdBand(upper=0.0, lower=0.0)

    def test_band_ordering(self):
        """Test upper > oracle > lower, symmetric at 0.5%."""
        for oracle in [0.01, 1.0, 100.0, 65000.0]:
            band = static_band(series_from_oracles([oracle]))
            assert band.upper > oracle > band.lower
            assert band.upper - oracle == pytest.approx(oracle - band.lower)
            assert band.upper == pytest.approx(oracle * 1.005)
            assert band.lower == pytest.approx(oracle * 0.995)

    def test_uses_latest_oracle(self):
        """Test only the most recent point matters."""
        band = static_band(series_from_oracles([50.0, 200.0]))
        assert band.upper == pytest.approx(201.0)
        assert band.lower == pytest.approx(199.0)

    def test_custom_half_width(self):
        """Test configurable half width."""
        band = static_band(series_from_oracles([100.0]), half_width=0.01)
        assert band.upper == pytest.approx(101.0)
        assert band.lower == pytest.approx(99.0)

    def test_negative_price_stays_ordered(self):
        """Test band stays ordered for a negative price."""
        band = static_band(series_from_oracles([-100.0]))
        assert band.upper >= band.lower


class TestStaticDeviationTrigger:
    """Test suite for the static deviation trigger."""

    def test_exceeds_threshold(self):
        """Test a 3% deviation fires at the tick price."""
        trigger = check_static_deviation(100.0, 103.0, t=42, threshold=0.02)
        assert trigger == TriggerPoint(t=42, value=100.0)

    def test_below_threshold(self):
        """Test a 1% deviation does not fire."""
        assert check_static_deviation(100.0, 101.0, t=42, threshold=0.02) is None

    def test_boundary_is_not_exceeded(self):
        """Test deviation equal to the threshold does not fire."""
        assert check_static_deviation(100.0, 102.0, t=0, threshold=0.02) is None

    def test_quote_below_price(self):
        """Test deviation is absolute."""
        trigger = check_static_deviation(100.0, 95.0, t=1)
        assert trigger is not None
        assert trigger.value == 100.0

    def test_absent_quote(self):
        """Test no quote means no check."""
        assert check_static_deviation(100.0, None, t=0) is None

    def test_zero_price(self):
        """Test a zero price is skipped."""
        assert check_static_deviation(0.0, 100.0, t=0) is None

    def test_zero_quote(self):
        """Test a zero quote counts as no quote."""
        assert check_static_deviation(100.0, 0.0, t=0) is None


class TestVolatilityFactor:
    """Test suite for volatility_factor."""

    def test_population_std(self):
        """Test population standard deviation over the mean."""
        assert volatility_factor([100.0, 102.0]) == pytest.approx(1.0 / 101.0)

    def test_matches_numpy(self):
        """Test ratio equals numpy's ddof=0 statistics."""
        window = [100.0, 100.2, 99.9, 100.1, 100.05]
        expected = np.std(window) / np.mean(window)
        assert volatility_factor(window) == pytest.approx(expected)

    def test_constant_window(self):
        """Test a flat window has zero volatility."""
        assert volatility_factor([100.0] * 11) == 0

    def test_clamped_to_cap(self):
        """Test extreme volatility is capped at 1%."""
        assert volatility_factor([1.0, 1000.0, 1.0, 1000.0]) == 0.01

    def test_custom_cap(self):
        """Test the cap is configurable."""
        assert volatility_factor([1.0, 1000.0], cap=0.05) == 0.05

    def test_zero_mean_uses_cap(self):
        """Test zero mean falls back to the cap instead of NaN."""
        assert volatility_factor([0.0, 0.0, 0.0]) == 0.01
        assert volatility_factor([-1.0, 1.0]) == 0.01

    def test_negative_mean_clamped_to_zero(self):
        """Test a negative ratio is clamped at zero."""
        assert volatility_factor([-100.0, -102.0]) == 0


class TestAdaptiveBands:
    """Test suite for adaptive bands."""

    def test_aligned_with_series(self):
        """Test one band per point."""
        series = series_from_oracles([100.0 + i for i in range(25)])
        assert len(adaptive_bands(series)) == 25

    def test_empty(self):
        """Test empty series gives no bands."""
        assert adaptive_bands([]) == []

    def test_first_band_is_static(self):
        """Test index 0 uses the fixed 0.5% band."""
        bands = adaptive_bands(series_from_oracles([100.0, 100.0]))
        assert bands[0].upper == pytest.approx(100.5)
        assert bands[0].lower == pytest.approx(99.5)

    def test_flat_series_collapses(self):
        """Test zero volatility gives a zero-width band after index 0."""
        bands = adaptive_bands(series_from_oracles([100.0] * 5))
        for band in bands[1:]:
            assert band.upper == band.lower == 100.0

    def test_second_point_uses_two_samples(self):
        """Test index 1 looks back one point."""
        bands = adaptive_bands(series_from_oracles([100.0, 102.0]))
        factor = 1.0 / 101.0
        assert bands[1].upper == pytest.approx(102.0 * (1 + factor))
        assert bands[1].lower == pytest.approx(102.0 * (1 - factor))

    def test_lookback_window(self):
        """Test windows hold at most lookback + 1 samples."""
        oracles = [100.0 + (i % 3) * 0.1 for i in range(20)]
        series = series_from_oracles(oracles)

        band = adaptive_band_at(series, 15)
        expected = ThresholdBand.around(oracles[15], volatility_factor(oracles[5:16]))
        assert band == expected

    def test_volatility_clamped(self):
        """Test band half-width never exceeds 1% of the oracle."""
        oracles = [1.0 if i % 2 else 1000.0 for i in range(30)]
        series = series_from_oracles(oracles)

        for point, band in zip(series, adaptive_bands(series)):
            assert band.upper >= band.lower
            assert band.half_width <= point.oracle * 0.01 + 1e-12

    def test_zero_prices(self):
        """Test all-zero oracle prices give a degenerate band without failing."""
        bands = adaptive_bands(series_from_oracles([0.0] * 4))
        assert all(b.upper == b.lower == 0.0 for b in bands)
