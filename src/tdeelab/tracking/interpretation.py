"""Human-readable text for estimator results.

Pure formatting: each function maps numbers to one of a few fixed
message templates and has no say in how the numbers are computed.
"""

from __future__ import annotations

from typing import Optional

from tdeelab.tracking.models import WindowFlag

# Daily deficit/surplus (kcal) inside which a patient counts as in balance
BALANCE_BAND_KCAL = 100

LOW_CONFIDENCE = 0.5
MODERATE_CONFIDENCE = 0.75

INSUFFICIENT_DATA_MESSAGE = (
    "Not enough data to estimate TDEE. At least {min_days} days with both "
    "weight and calories logged are needed."
)

FLAG_LABELS = {
    WindowFlag.PROBABLE_UNDER_REPORTING: "Probable under-reporting",
    WindowFlag.PROBABLE_OVER_REPORTING: "Probable over-reporting",
    WindowFlag.PROBABLE_FLUID_RETENTION: "Probable fluid-retention noise",
    WindowFlag.TOO_FEW_FOOD_LOGS: "Too few food logs",
    WindowFlag.TOO_FEW_WEIGH_INS: "Too few weigh-ins",
    WindowFlag.LOW_FOOD_LOG_COVERAGE: "Food logged on under 60% of days",
}


def confidence_tier(confidence: float) -> str:
    """Bucket a 0-1 confidence score: insufficient, low, moderate or high."""
    if confidence <= 0:
        return "insufficient"
    if confidence < LOW_CONFIDENCE:
        return "low"
    if confidence < MODERATE_CONFIDENCE:
        return "moderate"
    return "high"


def regression_interpretation(
    tdee_kcal: int,
    deficit_kcal: int,
    confidence: float,
    weight_change_rate_kg_per_day: float,
    min_days: int = 7,
) -> str:
    """Summarise a regression estimate in one or two sentences."""
    if not tdee_kcal or confidence == 0:
        return INSUFFICIENT_DATA_MESSAGE.format(min_days=min_days)

    weekly_change = weight_change_rate_kg_per_day * 7
    text = f"Estimated TDEE: {tdee_kcal} kcal/day. "

    if deficit_kcal < -BALANCE_BAND_KCAL:
        text += (
            f"Patient is in a caloric deficit of ~{abs(deficit_kcal)} kcal/day, "
            f"losing about {abs(weekly_change):.2f} kg/week. "
        )
    elif deficit_kcal > BALANCE_BAND_KCAL:
        text += (
            f"Patient is in a caloric surplus of ~{abs(deficit_kcal)} kcal/day, "
            f"gaining about {weekly_change:.2f} kg/week. "
        )
    else:
        text += "Patient is close to energy balance. "

    tier = confidence_tier(confidence)
    if tier == "low":
        text += "Low confidence - more data needed."
    elif tier == "moderate":
        text += "Moderate confidence."
    else:
        text += "High confidence."

    return text


def recommendation_text(
    tdee_kcal: float,
    recommended_intake_kcal: int,
    adjustment_kcal: int,
    goal_kg_per_week: float,
) -> str:
    """Explain an intake target for a weekly weight-change goal."""
    direction = "increase" if adjustment_kcal > 0 else "reduce"
    if goal_kg_per_week < 0:
        return (
            f"To lose {abs(goal_kg_per_week)} kg/week, eat about "
            f"{recommended_intake_kcal} kcal/day ({direction} by "
            f"{abs(adjustment_kcal)} kcal from current intake)."
        )
    if goal_kg_per_week > 0:
        return (
            f"To gain {goal_kg_per_week} kg/week, eat about "
            f"{recommended_intake_kcal} kcal/day ({direction} by "
            f"{abs(adjustment_kcal)} kcal from current intake)."
        )
    return f"To maintain weight, eat about {round(tdee_kcal)} kcal/day."


def describe_flag(flag: WindowFlag) -> str:
    return FLAG_LABELS[flag]


def describe_window(
    bias_median: Optional[int],
    adherence_median: Optional[float],
    confidence: float,
    flags: list[WindowFlag],
) -> str:
    """One-line reading of a summary window for reports."""
    if bias_median is None or adherence_median is None:
        text = "No days with both a food log and a modeled intake."
    else:
        text = (
            f"Reported intake is {bias_median:+d} kcal/day vs the model "
            f"({adherence_median:.0%} adherence)."
        )
    text += f" Confidence: {confidence_tier(confidence)}."
    if flags:
        text += " " + "; ".join(describe_flag(f) for f in flags) + "."
    return text
