"""
Tests for statistics primitives.
Pure functions with small hand-verifiable series.
"""

import pytest
import numpy as np

from analysis.calculations.statistics import (
    consistency,
    direction_label,
    is_increasing_trend,
    linear_trend_slope,
    mean,
    percent_change,
    simple_returns,
    std_dev,
    variance,
    volatility,
    StatisticsError
)


class TestMoments:
    """Tests for mean, variance and std_dev."""

    def test_mean_basic(self):
        assert mean([1.0, 2.0, 3.0]) == pytest.approx(2.0)

    def test_empty_input_is_zero(self):
        """Empty series resolve to 0 rather than raising."""
        assert mean([]) == 0.0
        assert variance([]) == 0.0
        assert std_dev([]) == 0.0

    def test_population_variance(self):
        """Variance divides by n, not n - 1."""
        values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        assert variance(values) == pytest.approx(4.0)
        assert std_dev(values) == pytest.approx(2.0)
        assert variance(values) == pytest.approx(np.var(values, ddof=0))

    def test_non_numeric_raises(self):
        with pytest.raises(StatisticsError):
            mean(['a', 'b'])


class TestConsistency:
    """Tests for the 1 - coefficient of variation score."""

    def test_constant_series_is_perfectly_consistent(self):
        assert consistency([1000.0, 1000.0, 1000.0]) == pytest.approx(1.0)

    def test_single_value_is_zero(self):
        assert consistency([1000.0]) == 0.0

    def test_zero_mean_is_zero(self):
        assert consistency([0.0, 0.0, 0.0]) == 0.0

    def test_floored_at_zero(self):
        """Coefficient of variation above 1 does not produce negative consistency."""
        assert consistency([0.0, 0.0, 0.0, 100.0]) == 0.0

    def test_hand_calculated_value(self):
        # mean 15, population std 5
        assert consistency([10.0, 20.0]) == pytest.approx(1 - 5 / 15)


class TestVolatility:
    """Tests for returns-based volatility."""

    def test_simple_returns_skip_non_positive_base(self):
        returns = simple_returns([0.0, 1.0, 2.0, 3.0])
        assert returns == pytest.approx([1.0, 0.5])

    def test_fewer_than_two_returns_is_zero(self):
        assert volatility([1.0, 2.0]) == 0.0
        assert volatility([1.0]) == 0.0
        assert volatility([]) == 0.0

    def test_constant_growth_has_zero_volatility(self):
        assert volatility([1.0, 2.0, 4.0, 8.0]) == pytest.approx(0.0)

    def test_volatility_in_percent(self):
        # returns +10% then -10%: std = 0.1
        assert volatility([100.0, 110.0, 99.0]) == pytest.approx(10.0)


class TestTrend:
    """Tests for slope, percent change and trend helpers."""

    def test_linear_slope_exact(self):
        assert linear_trend_slope([1.0, 3.0, 5.0, 7.0]) == pytest.approx(2.0)

    def test_linear_slope_short_input(self):
        assert linear_trend_slope([5.0]) == 0.0
        assert linear_trend_slope([]) == 0.0

    def test_percent_change(self):
        assert percent_change(150.0, 100.0) == pytest.approx(50.0)
        assert percent_change(50.0, 100.0) == pytest.approx(-50.0)

    def test_percent_change_zero_base(self):
        assert percent_change(10.0, 0.0) == 0.0
        assert percent_change(10.0, None) == 0.0

    def test_is_increasing_trend(self):
        assert is_increasing_trend([1, 2, 3, 4, 5]) is True
        assert is_increasing_trend([1, 2, 1, 2, 1]) is False
        assert is_increasing_trend([1]) is False

    @pytest.mark.parametrize('slope,label', [
        (0.5, 'growing'),
        (-0.5, 'declining'),
        (0.0, 'stable'),
    ])
    def test_direction_label(self, slope, label):
        assert direction_label(slope) == label
