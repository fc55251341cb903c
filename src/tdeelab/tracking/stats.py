"""Numeric primitives shared by the estimators.

None of these raise on degenerate input: empty or too-short series give
neutral values (0.0, None, or the input back) and the caller decides what
counts as insufficient data.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

import numpy as np


def present(values: Iterable[Optional[float]]) -> list[float]:
    """Drop missing entries (None or NaN)."""
    return [v for v in values if v is not None and not math.isnan(v)]


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


def median(values: Sequence[float]) -> Optional[float]:
    """Median; None for an empty sequence."""
    if len(values) == 0:
        return None
    return float(np.median(values))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """stddev / mean; 0.0 when the mean is zero."""
    avg = mean(values)
    if avg == 0:
        return 0.0
    return stddev(values) / avg


def linear_regression_slope(series: Sequence[float]) -> float:
    """Ordinary least squares slope of series[i] against i.

    Points are treated as equally spaced: calendar gaps between the
    underlying days are not accounted for.

    Example:
        >>> linear_regression_slope([90.0, 89.5])
        -0.5
    """
    n = len(series)
    if n < 2:
        return 0.0

    y = np.asarray(series, dtype=float)
    x = np.arange(n, dtype=float)
    x_centered = x - (n - 1) / 2
    denominator = float(np.sum(x_centered ** 2))
    if denominator == 0:
        return 0.0
    return float(np.sum(x_centered * (y - y.mean())) / denominator)


def slope_against(xs: Sequence[float], ys: Sequence[float]) -> Optional[float]:
    """OLS slope of ys against explicit xs; None if it is undefined."""
    if len(xs) < 2 or len(xs) != len(ys):
        return None
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    x_centered = x - x.mean()
    denominator = float(np.sum(x_centered ** 2))
    if denominator == 0:
        return None
    return float(np.sum(x_centered * (y - y.mean())) / denominator)


def detrended_stddev(values: Sequence[float]) -> float:
    """Population stddev of the residuals around the index-based linear trend."""
    if len(values) < 3:
        return 0.0
    y = np.asarray(values, dtype=float)
    x = np.arange(len(y), dtype=float)
    slope = linear_regression_slope(values)
    fitted = y.mean() + slope * (x - x.mean())
    return float(np.std(y - fitted))


def moving_average_smooth(series: Sequence[float], window_size: int) -> list[float]:
    """Centered moving average, truncated at the series boundaries.

    Each point is the mean of ``series[i - w//2 : i + ceil(w/2)]`` clipped
    to the series. Series no longer than the window come back unchanged.
    """
    values = list(series)
    if len(values) <= window_size:
        return values

    half_before = window_size // 2
    half_after = math.ceil(window_size / 2)
    smoothed = []
    for i in range(len(values)):
        start = max(0, i - half_before)
        end = min(len(values), i + half_after)
        smoothed.append(mean(values[start:end]))
    return smoothed
