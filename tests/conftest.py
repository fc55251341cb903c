"""Pytest fixtures for tdeelab tests."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Optional, Sequence

import pytest

from tdeelab.tracking.models import DailyRecord, PatientProfile, Sex

START = date(2025, 1, 1)


def build_series(
    intakes: Sequence[Optional[float]],
    weights: Sequence[Optional[float]],
    start: date = START,
) -> list[DailyRecord]:
    """Consecutive-day records from parallel intake/weight lists."""
    return [
        DailyRecord(
            date=start + timedelta(days=i),
            reported_intake_kcal=intake,
            weight_kg=weight,
        )
        for i, (intake, weight) in enumerate(zip(intakes, weights))
    ]


@pytest.fixture
def make_series() -> Callable[..., list[DailyRecord]]:
    return build_series


@pytest.fixture
def losing_series() -> list[DailyRecord]:
    """14 days, intake alternating 1800/2000, weight falling 0.1 kg/day from 90."""
    intakes = [1800.0 if i % 2 == 0 else 2000.0 for i in range(14)]
    weights = [round(90.0 - 0.1 * i, 1) for i in range(14)]
    return build_series(intakes, weights)


@pytest.fixture
def female_profile() -> PatientProfile:
    return PatientProfile(
        sex=Sex.FEMALE, age_years=40, height_cm=165.0, baseline_activity_factor=1.5
    )


@pytest.fixture
def male_profile() -> PatientProfile:
    return PatientProfile(sex=Sex.MALE, age_years=30, height_cm=180.0)
