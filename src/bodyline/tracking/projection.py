"""Day-by-day weight projection from an energy-balance model.

The simulation starts at today's weight and advances one day at a time:
    weight_{d} = weight_{d-1} - (TDEE - intake) × adherence / 7700

TDEE is re-estimated every 7 days from the simulated weight, so a
shrinking body burns less and a fixed intake slowly loses its deficit.
Adaptive mode re-targets intake at each re-estimation so the deficit
(or surplus) stays the same size instead.

In a surplus the daily gain is split into lean and fat mass. The lean
share is 70% up to a 400 kcal/day surplus and falls off linearly above it
(floored at 20%), and lean gain is capped at 0.2 kg/week scaled by
training frequency.

Each day is a pure step over a frozen ``SimulationState``; nothing is
carried between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Optional, Union

from bodyline.profiles.body_calc import TDEEEstimator, tdee_estimator_for
from bodyline.tracking.models import (
    DEFAULT_TRAINING_DAYS,
    LeanMassEstimate,
    ProjectionDataPoint,
    ProjectionTimeframe,
    UserProfile,
)

logger = logging.getLogger(__name__)

CALORIES_PER_KG_FAT = 7700

# Days between TDEE re-estimations
RECALCULATION_INTERVAL_DAYS = 7

# Lean/fat partitioning of a surplus
OPTIMAL_SURPLUS = 400  # kcal/day with the best lean ratio
MAX_LEAN_RATIO = 0.7
MIN_LEAN_RATIO = 0.2
LEAN_RATIO_FALLOFF = 1500  # kcal/day of extra surplus per unit of ratio lost
MAX_WEEKLY_LEAN_GAIN = 0.2  # kg/week at full training frequency
FULL_TRAINING_DAYS = 5

# Adherence multipliers for the confidence bands
DEFAULT_OPTIMISTIC_FACTOR = 1.1
DEFAULT_PESSIMISTIC_FACTOR = 0.8

DEFAULT_TIMEFRAME_DAYS = 84


def timeframe_days(timeframe: Union[ProjectionTimeframe, str]) -> int:
    """Number of projection days for a timeframe; unknown values give 84."""
    try:
        return ProjectionTimeframe(timeframe).days
    except ValueError:
        return DEFAULT_TIMEFRAME_DAYS


def timeframe_label(timeframe: Union[ProjectionTimeframe, str]) -> str:
    """Human label for a timeframe; unknown values read as the 12-week default."""
    try:
        return ProjectionTimeframe(timeframe).label
    except ValueError:
        return ProjectionTimeframe.TWELVE_WEEKS.label


def training_factor(training_days_per_week: int) -> float:
    """Fraction of lean-gain potential unlocked by training (max at 5 days)."""
    return min(training_days_per_week / FULL_TRAINING_DAYS, 1)


def lean_ratio(daily_surplus: float) -> float:
    """Share of a daily surplus that becomes lean mass."""
    if daily_surplus <= OPTIMAL_SURPLUS:
        return MAX_LEAN_RATIO
    ratio = MAX_LEAN_RATIO - (daily_surplus - OPTIMAL_SURPLUS) / LEAN_RATIO_FALLOFF
    return max(MIN_LEAN_RATIO, ratio)


def max_daily_lean_gain(training_days_per_week: int) -> float:
    """Physiological cap on lean gain per day (kg)."""
    return MAX_WEEKLY_LEAN_GAIN * training_factor(training_days_per_week) / 7


@dataclass(frozen=True)
class SimulationContext:
    """Inputs that stay fixed for a whole simulation run."""

    estimator: TDEEEstimator
    initial_deficit: float
    adherence: float
    adaptive_mode: bool
    is_surplus: bool
    training_days_per_week: int


@dataclass(frozen=True)
class SimulationState:
    """Body and plan state carried from one simulated day to the next."""

    weight: float
    tdee: float
    intake: float
    lean_gain: float = 0.0
    fat_gain: float = 0.0


def recalculate(state: SimulationState, context: SimulationContext) -> SimulationState:
    """Re-estimate TDEE from the simulated weight (and intake in adaptive mode)."""
    tdee = context.estimator.estimate(state.weight)
    intake = tdee - context.initial_deficit if context.adaptive_mode else state.intake
    return replace(state, tdee=tdee, intake=intake)


def apply_energy_gap(
    state: SimulationState,
    gap: float,
    context: SimulationContext,
) -> SimulationState:
    """
    Apply one day's realised energy gap to the simulated body.

    Args:
        state: State at the start of the day
        gap: (TDEE - intake) × adherence; positive is a deficit
        context: Fixed simulation inputs

    Returns:
        State after the day's weight change
    """
    if not (context.is_surplus and gap < 0):
        return replace(state, weight=state.weight - gap / CALORIES_PER_KG_FAT)

    daily_surplus = abs(gap)
    total_gain = daily_surplus / CALORIES_PER_KG_FAT
    lean_gain = min(
        total_gain * lean_ratio(daily_surplus),
        max_daily_lean_gain(context.training_days_per_week),
    )
    fat_gain = total_gain - lean_gain
    return replace(
        state,
        weight=state.weight + total_gain,
        lean_gain=state.lean_gain + lean_gain,
        fat_gain=state.fat_gain + fat_gain,
    )


def advance_day(
    state: SimulationState,
    day: int,
    context: SimulationContext,
) -> SimulationState:
    """Advance the simulation to the end of ``day``. Day 0 is the anchor."""
    if day == 0:
        return state
    if day % RECALCULATION_INTERVAL_DAYS == 0:
        state = recalculate(state, context)
        logger.debug(
            "Day %d: TDEE %.0f, intake %.0f at %.2f kg",
            day, state.tdee, state.intake, state.weight,
        )
    gap = (state.tdee - state.intake) * context.adherence
    return apply_energy_gap(state, gap, context)


def project_weight(
    start_weight: float,
    base_tdee: float,
    avg_daily_calories: float,
    days: int,
    *,
    today: date,
    adherence: float = 1.0,
    profile: Optional[UserProfile] = None,
    adaptive_mode: bool = False,
    target_deficit: Optional[float] = None,
) -> list[ProjectionDataPoint]:
    """
    Project body weight ``days`` days forward from ``today``.

    Args:
        start_weight: Current weight (kg)
        base_tdee: TDEE at the start weight (kcal/day)
        avg_daily_calories: Typical recent intake (kcal/day)
        days: Projection horizon; ``days + 1`` points are returned
        today: Date of day 0
        adherence: Fraction of the planned gap actually realised
        profile: Used for weekly TDEE re-estimation when present
        adaptive_mode: Keep the deficit constant by re-targeting intake
        target_deficit: Deficit to hold in adaptive mode
                        (default: base_tdee - avg_daily_calories)

    Returns:
        One ProjectionDataPoint per day, day 0 first
    """
    is_surplus = avg_daily_calories > base_tdee
    context = SimulationContext(
        estimator=tdee_estimator_for(profile, today),
        initial_deficit=(
            target_deficit if target_deficit is not None
            else base_tdee - avg_daily_calories
        ),
        adherence=adherence,
        adaptive_mode=adaptive_mode,
        is_surplus=is_surplus,
        training_days_per_week=(
            profile.training_days_per_week if profile is not None
            else DEFAULT_TRAINING_DAYS
        ),
    )
    logger.debug(
        "Projecting %d days from %.2f kg: TDEE %.0f, intake %.0f, adherence %.2f%s",
        days, start_weight, base_tdee, avg_daily_calories, adherence,
        " (adaptive)" if adaptive_mode else "",
    )

    state = SimulationState(
        weight=start_weight,
        tdee=base_tdee,
        intake=avg_daily_calories,
    )
    points = []
    for day in range(days + 1):
        state = advance_day(state, day, context)
        show_composition = is_surplus and day > 0
        points.append(
            ProjectionDataPoint(
                date=today + timedelta(days=day),
                projected_weight=state.weight,
                tdee=round(state.tdee),
                target_intake=round(state.intake),
                lean_mass_estimate=state.lean_gain if show_composition else None,
                fat_mass_estimate=state.fat_gain if show_composition else None,
            )
        )
    return points


def merge_projections(
    realistic: list[ProjectionDataPoint],
    optimistic: list[ProjectionDataPoint],
    pessimistic: list[ProjectionDataPoint],
) -> list[ProjectionDataPoint]:
    """Attach optimistic/pessimistic weights to the realistic series.

    TDEE, intake and body composition come from the realistic run only.
    """
    merged = []
    for i, point in enumerate(realistic):
        merged.append(
            replace(
                point,
                optimistic_weight=(
                    optimistic[i].projected_weight if i < len(optimistic) else None
                ),
                pessimistic_weight=(
                    pessimistic[i].projected_weight if i < len(pessimistic) else None
                ),
            )
        )
    return merged


def project_with_bands(
    start_weight: float,
    base_tdee: float,
    avg_daily_calories: float,
    days: int,
    *,
    today: date,
    adherence: float = 1.0,
    profile: Optional[UserProfile] = None,
    adaptive_mode: bool = False,
    target_deficit: Optional[float] = None,
    show_confidence_bands: bool = True,
    optimistic_factor: float = DEFAULT_OPTIMISTIC_FACTOR,
    pessimistic_factor: float = DEFAULT_PESSIMISTIC_FACTOR,
) -> list[ProjectionDataPoint]:
    """
    Run the realistic projection and, optionally, its confidence bands.

    The bands are the same simulation with adherence scaled by
    ``optimistic_factor`` and ``pessimistic_factor``. The product is not
    capped, so at full adherence the optimistic run models beating the
    plan (adherence 1.1 with the default factor).
    """

    def run(run_adherence: float) -> list[ProjectionDataPoint]:
        return project_weight(
            start_weight,
            base_tdee,
            avg_daily_calories,
            days,
            today=today,
            adherence=run_adherence,
            profile=profile,
            adaptive_mode=adaptive_mode,
            target_deficit=target_deficit,
        )

    realistic = run(adherence)
    if not show_confidence_bands:
        return realistic
    return merge_projections(
        realistic,
        run(adherence * optimistic_factor),
        run(adherence * pessimistic_factor),
    )


def estimate_lean_mass_gain(
    total_surplus: float,
    training_days_per_week: int,
    weeks: float,
) -> LeanMassEstimate:
    """
    Estimate lean vs fat mass gained over a whole bulk.

    Args:
        total_surplus: Total kcal eaten above TDEE over the period
        training_days_per_week: Resistance training frequency
        weeks: Length of the period

    Returns:
        Lean and fat gain in kg, rounded to 0.01
    """
    daily_surplus = total_surplus / (weeks * 7)
    ratio = lean_ratio(daily_surplus) if daily_surplus > 0 else 0.0

    total_gain = total_surplus / CALORIES_PER_KG_FAT
    max_lean_gain = MAX_WEEKLY_LEAN_GAIN * training_factor(training_days_per_week) * weeks
    lean_gain = min(total_gain * ratio, max_lean_gain)
    fat_gain = max(0.0, total_gain - lean_gain)

    return LeanMassEstimate(
        lean_mass_kg=round(lean_gain, 2),
        fat_mass_kg=round(fat_gain, 2),
    )
