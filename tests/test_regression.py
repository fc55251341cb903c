"""Tests for the regression TDEE estimator."""

from __future__ import annotations

import random
from datetime import date

import pytest

from tdeelab.tracking.models import DailyRecord, RegressionConfig
from tdeelab.tracking.regression import (
    calorie_recommendation,
    estimate_regression_tdee,
    estimate_regression_tdee_from_arrays,
    is_valid_day,
    regression_confidence,
)


class TestInsufficientData:
    """Tests for the insufficient-data result."""

    def test_too_few_valid_days(self, make_series) -> None:
        records = make_series([2000.0] * 6, [80.0] * 6)
        result = estimate_regression_tdee(records)

        assert result.tdee_kcal == 0
        assert result.confidence == 0
        assert result.method == "insufficient_data"
        assert result.avg_intake_kcal == 2000
        assert result.period_days == 6
        assert not result.is_sufficient
        assert "Not enough data" in result.interpretation

    def test_empty_series(self) -> None:
        result = estimate_regression_tdee([])
        assert result.tdee_kcal == 0
        assert result.avg_intake_kcal == 0
        assert result.period_days == 0

    def test_invalid_days_do_not_count(self, make_series) -> None:
        """Implausible intake and missing weights are dropped, not imputed."""
        intakes = [2000.0] * 5 + [300.0, 6000.0, None, 2000.0, 2000.0]
        weights = [80.0] * 8 + [None, 0.0]
        result = estimate_regression_tdee(make_series(intakes, weights))
        assert result.method == "insufficient_data"
        assert result.period_days == 5

    def test_no_valid_days_with_min_days_one(self, make_series) -> None:
        records = make_series([300.0], [80.0])
        result = estimate_regression_tdee(records, min_days=1)
        assert result.method == "insufficient_data"
        assert result.period_days == 0

    @pytest.mark.parametrize(
        "field", ["min_days", "ideal_days", "weight_smoothing_window"]
    )
    def test_non_positive_settings_rejected(self, field) -> None:
        with pytest.raises(ValueError, match=field):
            RegressionConfig().with_overrides(**{field: 0})
        with pytest.raises(ValueError, match=field):
            estimate_regression_tdee([], **{field: -1})

    def test_custom_min_days(self, make_series) -> None:
        records = make_series([2000.0] * 5, [80.0] * 5)
        assert estimate_regression_tdee(records, min_days=5).method == "linear_regression"


class TestEstimate:
    """Tests for the main estimate."""

    def test_flat_weight_gives_intake(self, make_series) -> None:
        for window in (1, 3, 5):
            records = make_series([2200.0] * 10, [75.0] * 10)
            result = estimate_regression_tdee(records, weight_smoothing_window=window)
            assert result.tdee_kcal == 2200
            assert result.deficit_kcal == 0
            assert result.weight_change_rate_kg_per_day == 0

    def test_losing_weight_means_tdee_above_intake(self, make_series) -> None:
        """Exact linear loss of r kg/day gives TDEE = I + r × ρ."""
        rate = 0.1
        records = make_series([2000.0] * 10, [80.0 - rate * i for i in range(10)])
        result = estimate_regression_tdee(records, weight_smoothing_window=1)

        assert result.weight_change_rate_kg_per_day == pytest.approx(-0.1)
        assert result.tdee_kcal == pytest.approx(2000 + rate * 7000, abs=1)
        assert result.deficit_kcal == pytest.approx(-700, abs=1)
        assert result.projected_weekly_change_kg == pytest.approx(-0.7)

    def test_gaining_weight_means_tdee_below_intake(self, make_series) -> None:
        records = make_series([3000.0] * 10, [70.0 + 0.05 * i for i in range(10)])
        result = estimate_regression_tdee(records, weight_smoothing_window=1)
        assert result.tdee_kcal == pytest.approx(3000 - 350, abs=1)
        assert result.deficit_kcal > 0
        assert "surplus" in result.interpretation

    def test_two_week_example(self, losing_series) -> None:
        """14 days at ~1900 kcal losing ~0.1 kg/day gives TDEE near 2600."""
        result = estimate_regression_tdee(losing_series)

        assert result.method == "linear_regression"
        assert result.avg_intake_kcal == 1900
        assert result.period_days == 14
        assert result.tdee_kcal == pytest.approx(2600, abs=30)
        assert result.deficit_kcal < -100
        assert result.confidence >= 0.75
        assert "deficit" in result.interpretation
        assert "High confidence" in result.interpretation

    def test_unsorted_input(self, losing_series) -> None:
        shuffled = list(losing_series)
        random.Random(7).shuffle(shuffled)
        assert estimate_regression_tdee(shuffled) == estimate_regression_tdee(losing_series)

    def test_energy_density_override(self, make_series) -> None:
        records = make_series([2000.0] * 10, [80.0 - 0.1 * i for i in range(10)])
        result = estimate_regression_tdee(
            records, energy_density_kcal_per_kg=7700, weight_smoothing_window=1
        )
        assert result.tdee_kcal == 2770

    def test_config_object(self, make_series) -> None:
        records = make_series([2000.0] * 8, [80.0] * 8)
        cfg = RegressionConfig(min_days=10)
        assert estimate_regression_tdee(records, cfg).method == "insufficient_data"

    def test_unknown_override_rejected(self) -> None:
        with pytest.raises(TypeError):
            estimate_regression_tdee([], rho=8000)

    def test_to_dict(self, losing_series) -> None:
        data = estimate_regression_tdee(losing_series).to_dict()
        assert data["method"] == "linear_regression"
        assert set(data) >= {"tdee_kcal", "confidence", "deficit_kcal", "interpretation"}


class TestConfidence:
    """Tests for regression_confidence and validity rules."""

    def test_full_coverage_no_noise(self) -> None:
        assert regression_confidence(14, [2000.0] * 14, [80.0] * 14, 14) == pytest.approx(1.0)

    def test_half_coverage(self) -> None:
        assert regression_confidence(7, [2000.0] * 7, [80.0] * 7, 14) == pytest.approx(0.7)

    def test_noisy_intake_lowers_confidence(self) -> None:
        steady = regression_confidence(14, [2000.0] * 14, [80.0] * 14, 14)
        noisy = regression_confidence(14, [1000.0, 3000.0] * 7, [80.0] * 14, 14)
        assert noisy < steady

    def test_short_series_scores_lower(self, losing_series) -> None:
        full = estimate_regression_tdee(losing_series)
        short = estimate_regression_tdee(losing_series[:8])
        assert short.confidence < full.confidence

    def test_valid_day_bounds_inclusive(self) -> None:
        cfg = RegressionConfig()
        day = date(2025, 1, 1)
        assert is_valid_day(DailyRecord(day, 500.0, 80.0), cfg)
        assert is_valid_day(DailyRecord(day, 5000.0, 80.0), cfg)
        assert not is_valid_day(DailyRecord(day, 499.0, 80.0), cfg)
        assert not is_valid_day(DailyRecord(day, 2000.0, None), cfg)
        assert not is_valid_day(DailyRecord(day, None, 80.0), cfg)


class TestFromArrays:
    """Tests for estimate_regression_tdee_from_arrays."""

    def test_matches_record_input(self, make_series) -> None:
        intakes = [2000.0] * 10
        weights = [80.0 - 0.1 * i for i in range(10)]
        from_arrays = estimate_regression_tdee_from_arrays(
            intakes, weights, end_date=date(2025, 1, 10)
        )
        assert from_arrays == estimate_regression_tdee(make_series(intakes, weights))

    def test_short_weights_list(self) -> None:
        result = estimate_regression_tdee_from_arrays([2000.0] * 10, [80.0] * 7)
        assert result.period_days == 7


class TestCalorieRecommendation:
    """Tests for calorie_recommendation."""

    def test_loss_goal(self) -> None:
        rec = calorie_recommendation(2500, 2300, -0.5)
        assert rec.recommended_intake_kcal == 2000
        assert rec.adjustment_kcal == -300
        assert "lose 0.5 kg/week" in rec.explanation
        assert "reduce by 300" in rec.explanation

    def test_gain_goal(self) -> None:
        rec = calorie_recommendation(2500, 2300, 0.35)
        assert rec.recommended_intake_kcal == 2850
        assert rec.adjustment_kcal == 550
        assert "gain" in rec.explanation

    def test_maintenance(self) -> None:
        rec = calorie_recommendation(2500, 2300, 0)
        assert rec.recommended_intake_kcal == 2500
        assert "maintain" in rec.explanation
