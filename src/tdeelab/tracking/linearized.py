"""Linearized energy-balance estimator.

Models the intake a patient would need to eat to produce the weight trend
actually observed, and compares it with what they report:

    EI_model(t) = EI_0 + ε·(BW_s(t) - BW_0) + ρ·(dBW/dt)(t)
    EE_model(t) = EE_0 + ε·(BW_s(t) - BW_0)
    bias(t)      = EI_rep(t) - EI_model(t)
    adherence(t) = EI_rep(t) / EI_model(t)

Where:
    ε     = metabolic adaptation (kcal/kg/day): expenditure drops as weight drops
    ρ     = energy density of weight change (kcal/kg)
    BW_s  = smoothed body weight
    EE_0  = Mifflin-St Jeor BMR × PAL at the baseline weight BW_0
    EI_0  = EE_0 (the baseline is assumed to be at energy balance)

ε and ρ are calibrated constants, not fit per patient.

Gating on "enough data" is left to the caller: a short or sparse series
still produces whatever can be computed, with low window confidence.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from tdeelab.profiles.body_calc import calculate_baseline_expenditure, calculate_bmr
from tdeelab.tracking.ema import smooth_ema, smooth_trailing_average, weight_slope
from tdeelab.tracking.models import (
    DailyEstimate,
    DailyRecord,
    LinearBaseline,
    LinearConfig,
    LinearParams,
    LinearResult,
    PatientProfile,
    WindowFlag,
    WindowSummary,
)
from tdeelab.tracking.stats import detrended_stddev, mean, median, present

logger = logging.getLogger(__name__)

# Series shorter than this (or with fewer than 2 weighed days) is unreliable
MIN_USABLE_DAYS = 7
MIN_USABLE_WEIGH_INS = 2

# Fluid-retention noise scales the window confidence by this factor
FLUID_NOISE_PENALTY = 0.8


def _round_or_none(value: Optional[float], digits: Optional[int] = None) -> Any:
    if value is None:
        return None
    return round(value, digits) if digits is not None else round(value)


def _clean_intake(value: Optional[float], cfg: LinearConfig) -> Optional[float]:
    if value is None or math.isnan(value):
        return None
    if value < cfg.min_valid_kcal or value > cfg.max_valid_kcal:
        return None
    return value


def _clean_weight(value: Optional[float]) -> Optional[float]:
    if value is None or math.isnan(value) or value <= 0:
        return None
    return value


def compute_baseline(
    profile: PatientProfile,
    bw0_kg: float,
    cfg: LinearConfig,
) -> LinearBaseline:
    """Baseline BMR and expenditure at weight BW0."""
    pal0 = profile.baseline_activity_factor or cfg.default_pal
    bmr0 = calculate_bmr(profile.age_years, profile.sex, profile.height_cm, bw0_kg)
    ee0 = calculate_baseline_expenditure(bmr0, pal0)
    return LinearBaseline(bw0_kg=bw0_kg, bmr0_kcal=bmr0, pal0=pal0, ee0_kcal=ee0, ei0_kcal=ee0)


def estimate_linearized_energy(
    profile: PatientProfile,
    series: Iterable[DailyRecord],
    config: Optional[LinearConfig] = None,
    **overrides: Any,
) -> LinearResult:
    """
    Run the linearized energy model over a patient's daily series.

    Args:
        profile: Patient anthropometrics (for the baseline)
        series: Daily records in any order
        config: Model settings (defaults if None)
        **overrides: Individual LinearConfig fields to replace

    Returns:
        LinearResult with per-day estimates, window summaries and baseline.
        Without any usable weigh-in the daily and window lists are empty.
    """
    cfg = (config or LinearConfig()).with_overrides(**overrides)
    params = LinearParams(
        eps_kcal_per_kg_day=cfg.adaptation_kcal_per_kg_day,
        rho_kcal_per_kg=cfg.energy_density_kcal_per_kg,
    )

    ordered = sorted(series, key=lambda r: r.date)
    dates = [r.date for r in ordered]
    weights = [_clean_weight(r.weight_kg) for r in ordered]
    intakes = [_clean_intake(r.reported_intake_kcal, cfg) for r in ordered]

    dropped = sum(
        1 for r, i in zip(ordered, intakes) if r.reported_intake_kcal is not None and i is None
    )
    if dropped:
        logger.debug("Dropped %d implausible intake entries", dropped)

    if cfg.smoothing == "ema":
        smoothed = smooth_ema(dates, weights, cfg.ema_alpha)
    else:
        smoothed = smooth_trailing_average(dates, weights)

    first_smoothed = next((w for w in smoothed if w is not None), None)
    bw0 = cfg.baseline_weight_kg or first_smoothed
    if bw0 is None:
        logger.debug("No usable weigh-ins in %d days; nothing to model", len(ordered))
        return LinearResult(
            daily=[],
            windows=[],
            baseline=None,
            params=params,
            notes=["No valid weight data"],
        )

    baseline = compute_baseline(profile, bw0, cfg)
    notes = [
        f"BMR0 = {round(baseline.bmr0_kcal)} kcal (Mifflin-St Jeor)",
        f"EE0 = EI0 = {round(baseline.ee0_kcal)} kcal (PAL {baseline.pal0})",
        f"BW0 = {bw0:.1f} kg",
    ]

    weighed_days = {d for d, w in zip(dates, weights) if w is not None}
    if len(ordered) < MIN_USABLE_DAYS or len(weighed_days) < MIN_USABLE_WEIGH_INS:
        notes.append(
            f"Insufficient data: {len(ordered)} days, {len(weighed_days)} weighed days"
        )

    slopes = weight_slope(dates, smoothed, cfg.slope_window_days)
    eps = params.eps_kcal_per_kg_day
    rho = params.rho_kcal_per_kg

    daily: list[DailyEstimate] = []
    for day, raw_weight, bw_s, slope, ei_rep in zip(dates, weights, smoothed, slopes, intakes):
        ei_model: Optional[float] = None
        ee_model: Optional[float] = None
        bias: Optional[float] = None
        adherence: Optional[float] = None

        if bw_s is not None and slope is not None:
            delta_bw = bw_s - bw0
            ei_model = baseline.ei0_kcal + eps * delta_bw + rho * slope
            ee_model = baseline.ee0_kcal + eps * delta_bw

            if ei_rep is not None:
                bias = ei_rep - ei_model
                adherence = ei_rep / ei_model if ei_model != 0 else None

        daily.append(
            DailyEstimate(
                date=day,
                weight_kg=raw_weight,
                smoothed_weight_kg=_round_or_none(bw_s, 1),
                weight_slope_kg_per_day=_round_or_none(slope, 3),
                modeled_intake_kcal=_round_or_none(ei_model),
                modeled_expenditure_kcal=_round_or_none(ee_model),
                reported_intake_kcal=_round_or_none(ei_rep),
                bias_kcal=_round_or_none(bias),
                adherence=_round_or_none(adherence, 2),
            )
        )

    windows = summarize_windows(daily, cfg)
    logger.debug("Linearized model: %d days, %d windows", len(daily), len(windows))

    return LinearResult(
        daily=daily,
        windows=windows,
        baseline=baseline,
        params=params,
        notes=notes,
    )


# ============================================================================
# Window summaries
# ============================================================================


def window_confidence(
    intake_days: int,
    weigh_in_days: int,
    cfg: LinearConfig,
) -> float:
    """
    Confidence from data density alone.

    Full windows score 0.6 plus up to 0.4 for coverage. Too few food logs
    caps the score at half the logged fraction; too few weigh-ins caps it
    below 0.6.
    """
    confidence = 0.6 + min(
        0.4,
        (intake_days / (cfg.window_days * 0.8)) * 0.2
        + (weigh_in_days / (cfg.window_days * 0.5)) * 0.2,
    )
    if intake_days < cfg.min_intake_days_per_window:
        confidence = min(confidence, intake_days / cfg.min_intake_days_per_window * 0.5)
    if weigh_in_days < cfg.min_weigh_ins_per_window:
        confidence = min(
            confidence,
            max(0.3, weigh_in_days / cfg.min_weigh_ins_per_window * 0.6),
        )
    return max(0.0, confidence)


def has_fluid_noise(raw_weights: list[float], ratio: float) -> bool:
    """Raw weigh-ins scatter around their own trend by more than ``ratio`` of body weight."""
    if len(raw_weights) < 3:
        return False
    return detrended_stddev(raw_weights) > ratio * mean(raw_weights)


def summarize_window(
    start: date,
    end: date,
    days: list[DailyEstimate],
    cfg: LinearConfig,
) -> WindowSummary:
    """Roll up the daily estimates falling in [start, end)."""
    biases = present([d.bias_kcal for d in days])
    adherences = present([d.adherence for d in days])
    modeled_intakes = present([d.modeled_intake_kcal for d in days])
    modeled_expenditures = present([d.modeled_expenditure_kcal for d in days])
    raw_weights = present([d.weight_kg for d in days])

    intake_days = sum(1 for d in days if d.reported_intake_kcal is not None)
    weigh_in_days = len(raw_weights)

    flags: list[WindowFlag] = []
    if intake_days < cfg.min_intake_days_per_window:
        flags.append(WindowFlag.TOO_FEW_FOOD_LOGS)
    if weigh_in_days < cfg.min_weigh_ins_per_window:
        flags.append(WindowFlag.TOO_FEW_WEIGH_INS)

    confidence = window_confidence(intake_days, weigh_in_days, cfg)

    if has_fluid_noise(raw_weights, cfg.fluid_noise_ratio):
        flags.append(WindowFlag.PROBABLE_FLUID_RETENTION)
        confidence *= FLUID_NOISE_PENALTY

    bias_median = median(biases)
    if bias_median is not None and bias_median < -cfg.bias_flag_threshold_kcal:
        flags.append(WindowFlag.PROBABLE_UNDER_REPORTING)
    elif bias_median is not None and bias_median > cfg.bias_flag_threshold_kcal:
        flags.append(WindowFlag.PROBABLE_OVER_REPORTING)

    if intake_days / cfg.window_days < cfg.low_coverage_fraction:
        flags.append(WindowFlag.LOW_FOOD_LOG_COVERAGE)

    return WindowSummary(
        start=start,
        end=end,
        days=len(days),
        intake_days=intake_days,
        weigh_in_days=weigh_in_days,
        bias_mean=_round_or_none(mean(biases) if biases else None),
        bias_median=_round_or_none(bias_median),
        adherence_mean=_round_or_none(mean(adherences) if adherences else None, 2),
        adherence_median=_round_or_none(median(adherences), 2),
        modeled_intake_mean=_round_or_none(mean(modeled_intakes) if modeled_intakes else None),
        modeled_expenditure_mean=_round_or_none(
            mean(modeled_expenditures) if modeled_expenditures else None
        ),
        confidence=round(confidence, 2),
        flags=flags,
    )


def summarize_windows(daily: list[DailyEstimate], cfg: LinearConfig) -> list[WindowSummary]:
    """
    Slide a ``window_days`` window over the series.

    Windows start at the first date and advance by ``cfg.step_days`` (half
    a window by default, so consecutive windows overlap). Windows with no
    days in them are skipped.
    """
    if not daily:
        return []

    first_date = daily[0].date
    last_date = daily[-1].date
    span = timedelta(days=cfg.window_days)
    step = timedelta(days=cfg.step_days)

    summaries = []
    start = first_date
    while start <= last_date:
        end = start + span
        in_window = [d for d in daily if start <= d.date < end]
        if in_window:
            summaries.append(summarize_window(start, end, in_window, cfg))
        start += step
    return summaries
