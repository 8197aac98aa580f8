"""Goal analytics over weight projections.

Milestones, time-to-goal, the straight-line target trajectory and
progress-vs-plan classification. Questions that can't be answered from
the data (no goal, zero deficit, deficit pointing the wrong way) return
None rather than raising.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from bodyline.tracking.models import (
    GoalEstimate,
    ProgressReport,
    ProgressStatus,
    ProjectionDataPoint,
    TrajectoryPoint,
    WeightEntry,
)
from bodyline.tracking.projection import CALORIES_PER_KG_FAT
from bodyline.tracking.series import first_entry

logger = logging.getLogger(__name__)

# Fractions of total goal progress worth marking, with their labels
MILESTONES = (
    (0.10, "10%"),
    (0.25, "25%"),
    (0.50, "50%"),
    (0.75, "75%"),
    (1.00, "Goal!"),
)

# A point only claims a milestone if its progress ratio is this close
MILESTONE_TOLERANCE = 0.05

# Difference from plan (kg) still considered on track
ON_TRACK_TOLERANCE_KG = 0.5


def add_milestones(
    start_weight: float,
    goal_weight: Optional[float],
    points: Sequence[ProjectionDataPoint],
) -> list[ProjectionDataPoint]:
    """
    Mark the first projection point reaching each progress milestone.

    A point claims a milestone when it is on the goal side of the
    milestone weight and its progress ratio is within
    ``MILESTONE_TOLERANCE`` of the milestone fraction. Each point claims at
    most one milestone and each milestone is claimed at most once. A
    series that jumps across a tolerance window in a single step leaves
    that milestone unmarked.

    Args:
        start_weight: Weight at the start of the projection
        goal_weight: Target weight, or None
        points: Projection series in day order

    Returns:
        New list of points with milestone flags set
    """
    if goal_weight is None or not points:
        return list(points)

    total_change = abs(goal_weight - start_weight)
    if total_change == 0:
        return list(points)

    losing = goal_weight < start_weight
    claimed: set[float] = set()
    marked = []

    for point in points:
        progress_ratio = abs(point.projected_weight - start_weight) / total_change

        for fraction, label in MILESTONES:
            if fraction in claimed:
                continue

            if losing:
                milestone_weight = start_weight - total_change * fraction
                crossed = point.projected_weight <= milestone_weight
            else:
                milestone_weight = start_weight + total_change * fraction
                crossed = point.projected_weight >= milestone_weight

            if crossed and abs(progress_ratio - fraction) < MILESTONE_TOLERANCE:
                claimed.add(fraction)
                point = replace(point, is_milestone=True, milestone_label=label)
                break

        marked.append(point)

    return marked


def estimate_time_to_goal(
    current_weight: float,
    goal_weight: Optional[float],
    daily_deficit: float,
    *,
    today: date,
) -> Optional[GoalEstimate]:
    """
    Estimate how long a constant daily deficit takes to reach the goal.

    Args:
        current_weight: Current weight (kg)
        goal_weight: Target weight (kg), or None
        daily_deficit: kcal/day below TDEE (negative for a surplus)
        today: Start date of the estimate

    Returns:
        GoalEstimate, or None if there is no goal, the deficit is zero, or
        the deficit moves weight away from the goal
    """
    if goal_weight is None or daily_deficit == 0:
        return None

    losing = goal_weight < current_weight
    if losing and daily_deficit < 0:
        logger.debug("Goal requires loss but intake is a surplus")
        return None
    if not losing and daily_deficit > 0:
        logger.debug("Goal requires gain but intake is a deficit")
        return None

    weight_change = abs(current_weight - goal_weight)
    days = math.ceil(weight_change * CALORIES_PER_KG_FAT / abs(daily_deficit))
    return GoalEstimate(
        days=days,
        weeks=math.ceil(days / 7),
        target_date=today + timedelta(days=days),
    )


def _planned_weight(start_weight: float, daily_deficit: float, days: int, losing: bool) -> float:
    expected_change = daily_deficit * days / CALORIES_PER_KG_FAT
    if losing:
        return start_weight - expected_change
    return start_weight + abs(expected_change)


def generate_target_trajectory(
    weights: Iterable[WeightEntry],
    goal_weight: Optional[float],
    daily_deficit: float,
    projection_days: int,
    *,
    today: date,
) -> list[TrajectoryPoint]:
    """
    Straight-line plan from the first weight entry toward the goal.

    Runs from the first entry's date through ``projection_days`` past
    today, assuming ``daily_deficit`` every day, and never passes the goal.

    Returns:
        Daily TrajectoryPoints, or an empty list without a goal or entries
    """
    first = first_entry(weights)
    if goal_weight is None or first is None:
        return []

    losing = goal_weight < first.weight
    total_days = (today - first.date).days + projection_days

    trajectory = []
    for day in range(total_days + 1):
        target = _planned_weight(first.weight, daily_deficit, day, losing)
        clamped = max(goal_weight, target) if losing else min(goal_weight, target)
        trajectory.append(
            TrajectoryPoint(
                date=first.date + timedelta(days=day),
                target_weight=round(clamped, 2),
            )
        )
    return trajectory


def calculate_target_weight_today(
    first_weight: WeightEntry,
    goal_weight: Optional[float],
    current_weight: float,
    daily_deficit: float,
    *,
    today: date,
) -> ProgressReport:
    """
    Compare actual progress with where the plan says weight should be.

    The plan assumes ``daily_deficit`` every day since the first entry.

    Args:
        first_weight: The first ever weight entry
        goal_weight: Target weight, or None
        current_weight: Current weight (kg)
        daily_deficit: kcal/day below TDEE (negative for a surplus)
        today: Reference date

    Returns:
        ProgressReport; status is NO_GOAL without a goal weight
    """
    if goal_weight is None:
        return ProgressReport(
            target_weight=None,
            difference=0.0,
            status=ProgressStatus.NO_GOAL,
            days_elapsed=0,
            expected_change=0.0,
        )

    days_elapsed = (today - first_weight.date).days
    if days_elapsed <= 0:
        return ProgressReport(
            target_weight=first_weight.weight,
            difference=0.0,
            status=ProgressStatus.ON_TRACK,
            days_elapsed=0,
            expected_change=0.0,
        )

    losing = goal_weight < first_weight.weight
    expected_change = daily_deficit * days_elapsed / CALORIES_PER_KG_FAT
    target_weight = _planned_weight(first_weight.weight, daily_deficit, days_elapsed, losing)

    actual_change = first_weight.weight - current_weight
    if losing:
        difference = actual_change - expected_change
    else:
        difference = expected_change - actual_change

    if abs(difference) <= ON_TRACK_TOLERANCE_KG:
        status = ProgressStatus.ON_TRACK
    elif difference > 0:
        status = ProgressStatus.AHEAD
    else:
        status = ProgressStatus.BEHIND

    return ProgressReport(
        target_weight=round(target_weight, 2),
        difference=round(difference, 2),
        status=status,
        days_elapsed=days_elapsed,
        expected_change=round(expected_change, 2),
    )
