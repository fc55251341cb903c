"""Adaptive TDEE estimation.

Two estimators share one data model:
- Regression estimator: TDEE from average intake and the fitted weight slope
- Linearized estimator: per-day modeled intake/expenditure, reporting bias
  and adherence, rolled up into windows with confidence and flags
"""

from __future__ import annotations

from tdeelab.tracking.linearized import estimate_linearized_energy
from tdeelab.tracking.models import (
    DailyEstimate,
    DailyRecord,
    LinearConfig,
    LinearResult,
    PatientProfile,
    RegressionConfig,
    RegressionResult,
    WindowFlag,
    WindowSummary,
)
from tdeelab.tracking.regression import (
    calorie_recommendation,
    estimate_regression_tdee,
    estimate_regression_tdee_from_arrays,
)

__all__ = [
    "DailyEstimate",
    "DailyRecord",
    "LinearConfig",
    "LinearResult",
    "PatientProfile",
    "RegressionConfig",
    "RegressionResult",
    "WindowFlag",
    "WindowSummary",
    "calorie_recommendation",
    "estimate_linearized_energy",
    "estimate_regression_tdee",
    "estimate_regression_tdee_from_arrays",
]
