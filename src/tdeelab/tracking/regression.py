"""Regression TDEE estimator.

Fits a straight line through the smoothed weight series and turns the
slope into an energy imbalance:

    TDEE = mean(reported intake) - slope × ρ

where ρ is the energy density of body-weight change (kcal/kg). Losing
weight (negative slope) means expenditure exceeds intake.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable, Optional, Sequence

from tdeelab.tracking.interpretation import recommendation_text, regression_interpretation
from tdeelab.tracking.models import (
    CalorieRecommendation,
    DailyRecord,
    RegressionConfig,
    RegressionResult,
)
from tdeelab.tracking.stats import (
    coefficient_of_variation,
    linear_regression_slope,
    mean,
    moving_average_smooth,
)

logger = logging.getLogger(__name__)

# Weights of the two confidence components
COVERAGE_WEIGHT = 0.6
CONSISTENCY_WEIGHT = 0.4


def is_valid_day(record: DailyRecord, config: RegressionConfig) -> bool:
    """A day counts only with a plausible intake and a positive weight."""
    intake = record.reported_intake_kcal
    weight = record.weight_kg
    if intake is None or weight is None:
        return False
    return config.min_valid_kcal <= intake <= config.max_valid_kcal and weight > 0


def regression_confidence(
    valid_days: int,
    intakes: Sequence[float],
    weights: Sequence[float],
    ideal_days: int,
) -> float:
    """
    Blend series length and logging consistency into a 0-1 score.

    0.6 × coverage (valid days vs ideal days, capped at 1) plus
    0.4 × consistency (1 minus the average coefficient of variation of
    intake and raw weight, floored at 0).
    """
    coverage = min(1.0, valid_days / ideal_days) if ideal_days > 0 else 1.0
    variability = (coefficient_of_variation(intakes) + coefficient_of_variation(weights)) / 2
    consistency = max(0.0, 1 - variability)
    return COVERAGE_WEIGHT * coverage + CONSISTENCY_WEIGHT * consistency


def _insufficient_result(valid: list[DailyRecord], config: RegressionConfig) -> RegressionResult:
    intakes: list[float] = [
        r.reported_intake_kcal for r in valid if r.reported_intake_kcal is not None
    ]
    return RegressionResult(
        tdee_kcal=0,
        confidence=0.0,
        method="insufficient_data",
        avg_intake_kcal=round(mean(intakes)) if intakes else 0,
        total_weight_change_kg=0.0,
        weight_change_rate_kg_per_day=0.0,
        period_days=len(valid),
        deficit_kcal=0,
        projected_weekly_change_kg=0.0,
        interpretation=regression_interpretation(0, 0, 0.0, 0.0, config.min_days),
    )


def estimate_regression_tdee(
    records: Iterable[DailyRecord],
    config: Optional[RegressionConfig] = None,
    **overrides: Any,
) -> RegressionResult:
    """
    Estimate TDEE from a series of daily records.

    Args:
        records: Daily records in any order
        config: Estimator settings (defaults if None)
        **overrides: Individual RegressionConfig fields to replace

    Returns:
        RegressionResult. With fewer than ``min_days`` valid days the result
        has method "insufficient_data", tdee 0 and confidence 0.
    """
    cfg = (config or RegressionConfig()).with_overrides(**overrides)

    ordered = sorted(records, key=lambda r: r.date)
    valid = [r for r in ordered if is_valid_day(r, cfg)]
    logger.debug(
        "Regression estimator: %d of %d days valid", len(valid), len(ordered)
    )

    if not valid or len(valid) < cfg.min_days:
        logger.debug(
            "Insufficient data: %d valid days, %d required", len(valid), cfg.min_days
        )
        return _insufficient_result(valid, cfg)

    intakes: list[float] = [
        r.reported_intake_kcal for r in valid if r.reported_intake_kcal is not None
    ]
    raw_weights: list[float] = [r.weight_kg for r in valid if r.weight_kg is not None]
    smoothed = moving_average_smooth(raw_weights, cfg.weight_smoothing_window)

    avg_intake = mean(intakes)
    rate = linear_regression_slope(smoothed)  # kg/day
    total_change = smoothed[-1] - smoothed[0]

    # Losing weight (rate < 0) means TDEE > intake
    tdee = avg_intake - rate * cfg.energy_density_kcal_per_kg
    deficit = avg_intake - tdee  # negative = deficit, positive = surplus

    confidence = regression_confidence(
        len(valid), intakes, raw_weights, cfg.ideal_days
    )

    tdee_kcal = round(tdee)
    deficit_kcal = round(deficit)
    confidence = round(confidence, 2)
    rate_rounded = round(rate, 3)

    return RegressionResult(
        tdee_kcal=tdee_kcal,
        confidence=confidence,
        method="linear_regression",
        avg_intake_kcal=round(avg_intake),
        total_weight_change_kg=round(total_change, 2),
        weight_change_rate_kg_per_day=rate_rounded,
        period_days=len(valid),
        deficit_kcal=deficit_kcal,
        projected_weekly_change_kg=round(rate * 7, 2),
        interpretation=regression_interpretation(
            tdee_kcal, deficit_kcal, confidence, rate_rounded, cfg.min_days
        ),
    )


def estimate_regression_tdee_from_arrays(
    intakes: Sequence[Optional[float]],
    weights: Sequence[Optional[float]],
    end_date: Optional[date] = None,
    config: Optional[RegressionConfig] = None,
    **overrides: Any,
) -> RegressionResult:
    """
    Estimate TDEE from parallel intake/weight lists of consecutive days.

    The last entry is dated ``end_date`` (today by default). A missing or
    short weights list leaves the remaining days unweighed.
    """
    end = end_date or date.today()
    n = len(intakes)
    records = [
        DailyRecord(
            date=end - timedelta(days=n - i - 1),
            reported_intake_kcal=intake,
            weight_kg=weights[i] if i < len(weights) else None,
        )
        for i, intake in enumerate(intakes)
    ]
    return estimate_regression_tdee(records, config, **overrides)


def calorie_recommendation(
    tdee_kcal: float,
    current_intake_kcal: float,
    goal_kg_per_week: float,
    energy_density_kcal_per_kg: float = 7000.0,
) -> CalorieRecommendation:
    """
    Daily intake needed to change weight at a target weekly rate.

    Args:
        tdee_kcal: Estimated TDEE
        current_intake_kcal: Current average intake
        goal_kg_per_week: Target change (negative to lose)
        energy_density_kcal_per_kg: Energy per kg of weight change

    Returns:
        CalorieRecommendation with target intake and change from current
    """
    daily_balance = goal_kg_per_week * energy_density_kcal_per_kg / 7
    recommended = tdee_kcal + daily_balance
    adjustment = recommended - current_intake_kcal

    recommended_kcal = round(recommended)
    adjustment_kcal = round(adjustment)
    return CalorieRecommendation(
        recommended_intake_kcal=recommended_kcal,
        adjustment_kcal=adjustment_kcal,
        explanation=recommendation_text(
            tdee_kcal, recommended_kcal, adjustment_kcal, goal_kg_per_week
        ),
    )
