"""Data models for TDEE estimation."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

from tdeelab.profiles.body_calc import ActivityLevel, Sex, activity_multiplier

_DAY_FIRST_DATE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")


class WindowFlag(Enum):
    """Data-quality and reporting flags raised on a summary window."""
    PROBABLE_UNDER_REPORTING = "probable_under_reporting"
    PROBABLE_OVER_REPORTING = "probable_over_reporting"
    PROBABLE_FLUID_RETENTION = "probable_fluid_retention"
    TOO_FEW_FOOD_LOGS = "too_few_food_logs"
    TOO_FEW_WEIGH_INS = "too_few_weigh_ins"
    LOW_FOOD_LOG_COVERAGE = "low_food_log_coverage"


def parse_date(value: "str | date | datetime") -> date:
    """Parse an ISO date, also accepting the day-first DD-MM-YYYY form."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    match = _DAY_FIRST_DATE.match(text)
    if match:
        day, month, year = match.groups()
        text = f"{year}-{month}-{day}"
    return date.fromisoformat(text[:10])


def _optional_number(value: Any) -> Optional[float]:
    """Blank strings, None and NaN all mean 'not logged'."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    number = float(value)
    if math.isnan(number):
        return None
    return number


@dataclass(frozen=True)
class DailyRecord:
    """One calendar day of logged data.

    A missing value is ``None``: a day without a food log is not a day
    with zero intake.
    """

    date: date
    reported_intake_kcal: Optional[float] = None
    weight_kg: Optional[float] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "DailyRecord":
        """Build a record from a dict with date/intake/weight keys."""
        return cls(
            date=parse_date(row["date"]),
            reported_intake_kcal=_optional_number(row.get("reported_intake_kcal")),
            weight_kg=_optional_number(row.get("weight_kg")),
        )


@dataclass(frozen=True)
class PatientProfile:
    """Patient anthropometrics used for the baseline expenditure."""

    sex: Sex
    age_years: int
    height_cm: float
    baseline_activity_factor: Optional[float] = None  # PAL0, None = configured default

    def __post_init__(self) -> None:
        if not isinstance(self.sex, Sex):
            raise ValueError(f"sex must be a Sex, got '{self.sex}'")
        if self.age_years <= 0:
            raise ValueError(f"age_years must be positive, got {self.age_years}")
        if self.height_cm <= 0:
            raise ValueError(f"height_cm must be positive, got {self.height_cm}")
        if (
            self.baseline_activity_factor is not None
            and self.baseline_activity_factor < 1.0
        ):
            raise ValueError(
                "baseline_activity_factor must be >= 1.0, "
                f"got {self.baseline_activity_factor}"
            )

    @classmethod
    def create(
        cls,
        sex: "str | Sex",
        age_years: int,
        height_cm: float,
        activity: "float | str | ActivityLevel | None" = None,
    ) -> "PatientProfile":
        """Build a profile from loose inputs.

        Args:
            sex: "male"/"female" (or "M"/"F")
            age_years: Age in years
            height_cm: Height in centimetres
            activity: Numeric PAL, an ActivityLevel (or its name), or None

        Returns:
            Validated PatientProfile
        """
        pal: Optional[float]
        if activity is None:
            pal = None
        elif isinstance(activity, (int, float)):
            pal = float(activity)
        else:
            pal = activity_multiplier(activity)

        return cls(
            sex=Sex.parse(sex),
            age_years=int(age_years),
            height_cm=float(height_cm),
            baseline_activity_factor=pal,
        )


# ============================================================================
# Estimator configuration
# ============================================================================


@dataclass(frozen=True)
class RegressionConfig:
    """Settings for the regression estimator."""

    energy_density_kcal_per_kg: float = 7000.0
    min_days: int = 7
    ideal_days: int = 14
    min_valid_kcal: float = 500.0
    max_valid_kcal: float = 5000.0
    weight_smoothing_window: int = 3

    def __post_init__(self) -> None:
        if self.min_days < 1:
            raise ValueError(f"min_days must be >= 1, got {self.min_days}")
        if self.ideal_days < 1:
            raise ValueError(f"ideal_days must be >= 1, got {self.ideal_days}")
        if self.weight_smoothing_window < 1:
            raise ValueError(
                f"weight_smoothing_window must be >= 1, got {self.weight_smoothing_window}"
            )

    def with_overrides(self, **overrides: Any) -> "RegressionConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class LinearConfig:
    """Settings for the linearized energy-balance estimator.

    Attributes:
        smoothing: "ema" (exponential, carry-forward) or "ma7" (trailing 7-day mean)
        ema_alpha: Daily EMA smoothing factor
        slope_window_days: Trailing span used for the local dBW/dt estimate
        window_days: Length of each summary window
        window_step_days: Offset between windows; None = half a window (rolling)
        adaptation_kcal_per_kg_day: epsilon, expenditure change per kg of weight change
        energy_density_kcal_per_kg: rho, energy stored per kg of weight change
        baseline_weight_kg: BW0 override; None = first smoothed weight
    """

    smoothing: str = "ema"
    ema_alpha: float = 0.25
    slope_window_days: int = 7
    window_days: int = 14
    window_step_days: Optional[int] = None
    min_intake_days_per_window: int = 7
    min_weigh_ins_per_window: int = 4
    default_pal: float = 1.6
    energy_density_kcal_per_kg: float = 7000.0
    adaptation_kcal_per_kg_day: float = 22.0
    min_valid_kcal: float = 500.0
    max_valid_kcal: float = 5000.0
    baseline_weight_kg: Optional[float] = None
    bias_flag_threshold_kcal: float = 300.0
    fluid_noise_ratio: float = 0.02
    low_coverage_fraction: float = 0.6

    def __post_init__(self) -> None:
        if self.smoothing not in ("ema", "ma7"):
            raise ValueError(f"smoothing must be 'ema' or 'ma7', got '{self.smoothing}'")
        if not 0 < self.ema_alpha <= 1:
            raise ValueError(f"ema_alpha must be in (0, 1], got {self.ema_alpha}")
        if self.window_days < 1:
            raise ValueError(f"window_days must be >= 1, got {self.window_days}")

    @property
    def step_days(self) -> int:
        """Offset between consecutive windows."""
        if self.window_step_days is not None:
            return max(1, self.window_step_days)
        return max(1, self.window_days // 2)

    def with_overrides(self, **overrides: Any) -> "LinearConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


# ============================================================================
# Results
# ============================================================================


@dataclass
class RegressionResult:
    """Aggregate TDEE estimate from the regression estimator."""

    tdee_kcal: int
    confidence: float
    method: str  # 'linear_regression' or 'insufficient_data'
    avg_intake_kcal: int
    total_weight_change_kg: float
    weight_change_rate_kg_per_day: float
    period_days: int
    deficit_kcal: int  # negative = deficit, positive = surplus
    projected_weekly_change_kg: float
    interpretation: str = ""

    @property
    def is_sufficient(self) -> bool:
        return self.method != "insufficient_data"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CalorieRecommendation:
    """Intake target to reach a weekly weight-change goal."""

    recommended_intake_kcal: int
    adjustment_kcal: int
    explanation: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DailyEstimate:
    """Modeled energy balance for one day of the series."""

    date: date
    weight_kg: Optional[float]
    smoothed_weight_kg: Optional[float]
    weight_slope_kg_per_day: Optional[float]
    modeled_intake_kcal: Optional[int]
    modeled_expenditure_kcal: Optional[int]
    reported_intake_kcal: Optional[int]
    bias_kcal: Optional[int]  # reported - modeled
    adherence: Optional[float]  # reported / modeled

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


@dataclass
class WindowSummary:
    """Rollup of daily estimates over a window [start, end)."""

    start: date
    end: date
    days: int
    intake_days: int
    weigh_in_days: int
    bias_mean: Optional[int]
    bias_median: Optional[int]
    adherence_mean: Optional[float]
    adherence_median: Optional[float]
    modeled_intake_mean: Optional[int]
    modeled_expenditure_mean: Optional[int]
    confidence: float
    flags: list[WindowFlag] = field(default_factory=list)

    def has_flag(self, flag: WindowFlag) -> bool:
        return flag in self.flags

    def to_dict(self) -> dict:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        data["end"] = self.end.isoformat()
        data["flags"] = [f.value for f in self.flags]
        return data


@dataclass(frozen=True)
class LinearBaseline:
    """Baseline values the linearized model is anchored to."""

    bw0_kg: float
    bmr0_kcal: float
    pal0: float
    ee0_kcal: float
    ei0_kcal: float  # equals ee0: baseline assumed at energy balance


@dataclass(frozen=True)
class LinearParams:
    """Fixed model parameters (calibrated constants, not fit per patient)."""

    eps_kcal_per_kg_day: float
    rho_kcal_per_kg: float


@dataclass
class LinearResult:
    """Output of the linearized energy-balance estimator."""

    daily: list[DailyEstimate]
    windows: list[WindowSummary]
    baseline: Optional[LinearBaseline]
    params: LinearParams
    notes: list[str] = field(default_factory=list)

    @property
    def latest_window(self) -> Optional[WindowSummary]:
        return self.windows[-1] if self.windows else None

    @property
    def latest_expenditure(self) -> Optional[DailyEstimate]:
        """Most recent day with a modeled expenditure."""
        for estimate in reversed(self.daily):
            if estimate.modeled_expenditure_kcal is not None:
                return estimate
        return None

    def to_dict(self) -> dict:
        baseline = None
        if self.baseline is not None:
            baseline = {
                "bw0_kg": round(self.baseline.bw0_kg, 1),
                "bmr0_kcal": round(self.baseline.bmr0_kcal),
                "pal0": self.baseline.pal0,
                "ee0_kcal": round(self.baseline.ee0_kcal),
                "ei0_kcal": round(self.baseline.ei0_kcal),
            }
        return {
            "daily": [d.to_dict() for d in self.daily],
            "windows": [w.to_dict() for w in self.windows],
            "overall": {
                "baseline": baseline,
                "params": asdict(self.params),
                "notes": list(self.notes),
            },
        }
