"""Tests for result interpretation text."""

from __future__ import annotations

import pytest

from tdeelab.tracking.interpretation import (
    confidence_tier,
    describe_flag,
    describe_window,
    regression_interpretation,
)
from tdeelab.tracking.models import WindowFlag


class TestConfidenceTier:
    """Tests for confidence_tier."""

    @pytest.mark.parametrize(
        "confidence,tier",
        [(0.0, "insufficient"), (0.3, "low"), (0.5, "moderate"), (0.74, "moderate"), (0.75, "high")],
    )
    def test_tiers(self, confidence: float, tier: str) -> None:
        assert confidence_tier(confidence) == tier


class TestRegressionInterpretation:
    """Tests for regression_interpretation."""

    def test_insufficient(self) -> None:
        text = regression_interpretation(0, 0, 0.0, 0.0, min_days=10)
        assert "Not enough data" in text
        assert "10 days" in text

    def test_deficit_low_confidence(self) -> None:
        text = regression_interpretation(2600, -700, 0.4, -0.1)
        assert "deficit of ~700 kcal/day" in text
        assert "losing about 0.70 kg/week" in text
        assert "Low confidence" in text

    def test_balance_band(self) -> None:
        text = regression_interpretation(2200, 80, 0.6, 0.01)
        assert "close to energy balance" in text
        assert "Moderate confidence" in text


class TestWindowText:
    """Tests for window descriptions."""

    def test_every_flag_has_label(self) -> None:
        for flag in WindowFlag:
            assert describe_flag(flag)

    def test_describe_window(self) -> None:
        text = describe_window(-420, 0.81, 0.9, [WindowFlag.PROBABLE_UNDER_REPORTING])
        assert "-420 kcal/day" in text
        assert "81% adherence" in text
        assert "Probable under-reporting" in text

    def test_describe_empty_window(self) -> None:
        text = describe_window(None, None, 0.2, [WindowFlag.TOO_FEW_FOOD_LOGS])
        assert "No days" in text
        assert "low" in text
