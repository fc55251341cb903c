"""Tests for the shared numeric primitives."""

from __future__ import annotations

import math

import pytest

from tdeelab.tracking.stats import (
    coefficient_of_variation,
    detrended_stddev,
    linear_regression_slope,
    mean,
    median,
    moving_average_smooth,
    present,
    slope_against,
    stddev,
)


class TestMeanAndStddev:
    """Tests for mean and stddev."""

    def test_mean_of_empty_is_zero(self) -> None:
        assert mean([]) == 0.0

    def test_mean(self) -> None:
        assert mean([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)

    def test_stddev_is_population(self) -> None:
        """Population stddev of [2, 4, 4, 4, 5, 5, 7, 9] is exactly 2."""
        assert stddev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_stddev_floor_for_short_input(self) -> None:
        """Fewer than two values give 0, never NaN."""
        assert stddev([]) == 0.0
        assert stddev([42.0]) == 0.0

    def test_median_even_and_odd(self) -> None:
        assert median([3.0, 1.0, 2.0]) == 2.0
        assert median([4.0, 1.0, 3.0, 2.0]) == 2.5
        assert median([]) is None

    def test_coefficient_of_variation(self) -> None:
        assert coefficient_of_variation([1800, 2000]) == pytest.approx(100 / 1900)
        assert coefficient_of_variation([0.0, 0.0]) == 0.0

    def test_present_drops_none_and_nan(self) -> None:
        assert present([1.0, None, math.nan, 2.0]) == [1.0, 2.0]


class TestLinearRegressionSlope:
    """Tests for linear_regression_slope."""

    def test_two_points(self) -> None:
        """Slope through (0, a) and (1, b) is b - a."""
        assert linear_regression_slope([90.0, 89.5]) == pytest.approx(-0.5)
        assert linear_regression_slope([3.0, 10.0]) == pytest.approx(7.0)

    def test_short_series_is_zero(self) -> None:
        assert linear_regression_slope([]) == 0.0
        assert linear_regression_slope([80.0]) == 0.0

    def test_exact_line(self) -> None:
        series = [100.0 - 0.25 * i for i in range(10)]
        assert linear_regression_slope(series) == pytest.approx(-0.25)

    def test_flat_series(self) -> None:
        assert linear_regression_slope([70.0] * 8) == pytest.approx(0.0)

    def test_slope_against_dates(self) -> None:
        """Explicit x positions account for gaps."""
        assert slope_against([0, 2, 4], [80.0, 79.0, 78.0]) == pytest.approx(-0.5)
        assert slope_against([0], [80.0]) is None
        assert slope_against([1, 1], [80.0, 81.0]) is None


class TestMovingAverageSmooth:
    """Tests for moving_average_smooth."""

    def test_constant_series_is_unchanged(self) -> None:
        series = [75.0] * 10
        assert moving_average_smooth(series, 3) == pytest.approx(series)
        assert moving_average_smooth(series, 4) == pytest.approx(series)

    def test_short_series_returned_unchanged(self) -> None:
        series = [80.0, 81.0, 79.0]
        assert moving_average_smooth(series, 3) == series
        assert moving_average_smooth(series, 5) == series

    def test_centered_window_truncated_at_edges(self) -> None:
        series = [1.0, 2.0, 6.0, 3.0, 8.0]
        # window 3: [0,2), [0,3), [1,4), [2,5), [3,5)
        expected = [1.5, 3.0, 11 / 3, 17 / 3, 5.5]
        assert moving_average_smooth(series, 3) == pytest.approx(expected)

    def test_interior_of_linear_series_preserved(self) -> None:
        series = [90.0 - 0.1 * i for i in range(10)]
        smoothed = moving_average_smooth(series, 3)
        assert smoothed[1:-1] == pytest.approx(series[1:-1])


class TestDetrendedStddev:
    """Tests for detrended_stddev."""

    def test_perfect_line_has_no_residual(self) -> None:
        assert detrended_stddev([80.0, 79.5, 79.0, 78.5]) == pytest.approx(0.0, abs=1e-9)

    def test_zigzag_has_residual(self) -> None:
        assert detrended_stddev([80.0, 83.0, 80.0, 83.0, 80.0]) > 1.0

    def test_short_input(self) -> None:
        assert detrended_stddev([80.0, 90.0]) == 0.0
