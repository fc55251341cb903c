"""Body calculations for the baseline energy expenditure.

Uses the Mifflin-St Jeor equation for BMR as it's widely validated for
calculating resting metabolic rate, scaled by a Physical Activity Level
(PAL) multiplier to get the baseline expenditure.
"""

from __future__ import annotations

from enum import Enum


class Sex(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: "str | Sex") -> "Sex":
        """Accept 'male'/'female' as well as the short 'M'/'F' forms."""
        if isinstance(value, Sex):
            return value
        normalized = value.strip().lower()
        if normalized in ("m", "male"):
            return cls.MALE
        if normalized in ("f", "female"):
            return cls.FEMALE
        raise ValueError(f"sex must be 'male' or 'female', got '{value}'")


class ActivityLevel(Enum):
    """Activity level names mapped to a PAL multiplier."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    ACTIVE = "active"                # Hard exercise 6-7 days/week
    VERY_ACTIVE = "very_active"      # Very hard exercise, physical job


# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}


def calculate_bmr(
    age: int,
    sex: Sex,
    height_cm: float,
    weight_kg: float,
) -> float:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        age: Age in years
        sex: Biological sex
        height_cm: Height in centimetres
        weight_kg: Weight in kilograms

    Returns:
        BMR in calories per day
    """
    if sex == Sex.MALE:
        bmr = (10 * weight_kg) + (6.25 * height_cm) - (5 * age) + 5
    else:
        bmr = (10 * weight_kg) + (6.25 * height_cm) - (5 * age) - 161

    return bmr


def activity_multiplier(level: "str | ActivityLevel") -> float:
    """Look up the PAL multiplier for an activity level (or its name)."""
    if not isinstance(level, ActivityLevel):
        level = ActivityLevel(level.strip().lower())
    return ACTIVITY_MULTIPLIERS[level]


def calculate_baseline_expenditure(bmr: float, pal: float) -> float:
    """Baseline expenditure EE0 = BMR0 x PAL0."""
    return bmr * pal
