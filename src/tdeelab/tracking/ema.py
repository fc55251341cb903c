"""Weight smoothing for the linearized energy model.

The exponential trend follows the Hacker's Diet formula:
    T_n = T_{n-1} + α × (W_n - T_{n-1})

With α=0.25 this damps day-to-day water, gut content and scale noise while
following the underlying weight within about a week.

Weigh-ins are not required daily. Between weigh-ins the last trend value is
carried forward, and the next weigh-in uses a time-scaled smoothing factor:
    α_adjusted = 1 - (1 - α)^t
where t is days since the previous weigh-in.

Reference: https://www.fourmilab.ch/hackdiet/
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Sequence

from tdeelab.tracking.stats import mean, slope_against

DEFAULT_ALPHA = 0.25

# Trailing span for the "MA7" smoothing option
DEFAULT_TRAILING_DAYS = 7


def time_scaled_alpha(base_alpha: float, days_elapsed: float) -> float:
    """
    Adjust smoothing factor for non-daily measurements.

    Args:
        base_alpha: Base smoothing factor for a one-day step
        days_elapsed: Days since last measurement

    Returns:
        Adjusted smoothing factor

    Example:
        >>> time_scaled_alpha(0.25, 1)
        0.25
        >>> round(time_scaled_alpha(0.25, 3), 3)  # 1 - 0.75^3
        0.578
    """
    if days_elapsed <= 0:
        days_elapsed = 1
    return 1 - (1 - base_alpha) ** days_elapsed


def update_trend(
    prev_trend: float,
    today_weight: float,
    smoothing: float = DEFAULT_ALPHA,
    days_elapsed: float = 1,
) -> float:
    """
    Calculate new trend value using exponentially smoothed moving average.

    Args:
        prev_trend: Previous trend value (T_{n-1})
        today_weight: Today's scale weight (W_n)
        smoothing: Base smoothing factor
        days_elapsed: Days since last measurement (default 1)

    Returns:
        Today's trend value (T_n)
    """
    adjusted_alpha = time_scaled_alpha(smoothing, days_elapsed)
    return prev_trend + adjusted_alpha * (today_weight - prev_trend)


def smooth_ema(
    dates: Sequence[date],
    weights: Sequence[Optional[float]],
    alpha: float = DEFAULT_ALPHA,
) -> list[Optional[float]]:
    """
    Exponential trend over a day series with missing weigh-ins.

    The first weigh-in initialises the trend. Days without a weigh-in carry
    the last trend value forward; days before the first weigh-in stay None.

    Args:
        dates: Day of each entry, ascending
        weights: Scale weight per day, None when not weighed
        alpha: Smoothing factor for a one-day step

    Returns:
        Trend value per day, same length as weights
    """
    trends: list[Optional[float]] = []
    last_trend: Optional[float] = None
    last_date: Optional[date] = None

    for day, weight in zip(dates, weights):
        if weight is None:
            trends.append(last_trend)
            continue

        if last_trend is None or last_date is None:
            last_trend = weight
        else:
            last_trend = update_trend(last_trend, weight, alpha, (day - last_date).days)
        last_date = day
        trends.append(last_trend)

    return trends


def smooth_trailing_average(
    dates: Sequence[date],
    weights: Sequence[Optional[float]],
    span_days: int = DEFAULT_TRAILING_DAYS,
) -> list[Optional[float]]:
    """
    Trailing mean of the weigh-ins within ``span_days`` before each weigh-in.

    Unlike the exponential trend nothing is carried forward: a day without
    a weigh-in has no smoothed value.
    """
    smoothed: list[Optional[float]] = []
    for i, (day, weight) in enumerate(zip(dates, weights)):
        if weight is None:
            smoothed.append(None)
            continue

        cutoff = day - timedelta(days=span_days)
        window = [
            w
            for d, w in zip(dates[: i + 1], weights[: i + 1])
            if w is not None and d >= cutoff
        ]
        smoothed.append(mean(window))
    return smoothed


def weight_slope(
    dates: Sequence[date],
    smoothed: Sequence[Optional[float]],
    window_days: int = 7,
) -> list[Optional[float]]:
    """
    Local trend slope dBW/dt (kg/day) for each day.

    Fits a least-squares line through the smoothed values from the trailing
    ``window_days`` (inclusive) against their calendar day offsets. Days
    with no smoothed value, or fewer than two points in the span, get None.
    """
    slopes: list[Optional[float]] = []
    for i, (day, value) in enumerate(zip(dates, smoothed)):
        if value is None:
            slopes.append(None)
            continue

        cutoff = day - timedelta(days=window_days)
        xs: list[float] = []
        ys: list[float] = []
        for d, v in zip(dates[: i + 1], smoothed[: i + 1]):
            if v is not None and d >= cutoff:
                xs.append(float((d - day).days))
                ys.append(v)
        slopes.append(slope_against(xs, ys))
    return slopes


def estimate_weekly_change(trend_start: float, trend_end: float, days: int = 7) -> float:
    """
    Estimate weekly weight change from trend values.

    Args:
        trend_start: Trend value at start of period
        trend_end: Trend value at end of period
        days: Number of days in period (default 7)

    Returns:
        Estimated weekly change in kg (negative = losing)
    """
    if days <= 0:
        return 0.0
    daily_change = (trend_end - trend_start) / days
    return daily_change * 7
