"""Projection report for a snapshot of tracking data.

Ties the pieces together the way the dashboard shows them: start from the
latest weight, estimate TDEE, average recent intake, project forward with
confidence bands and milestones, then measure progress against the goal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

from bodyline.profiles.body_calc import baseline_tdee
from bodyline.tracking.analytics import (
    add_milestones,
    calculate_target_weight_today,
    estimate_time_to_goal,
    generate_target_trajectory,
)
from bodyline.tracking.models import (
    GoalEstimate,
    ProgressReport,
    ProjectionDataPoint,
    ProjectionTimeframe,
    Snapshot,
    TrajectoryPoint,
)
from bodyline.tracking.projection import (
    DEFAULT_OPTIMISTIC_FACTOR,
    DEFAULT_PESSIMISTIC_FACTOR,
    project_with_bands,
    timeframe_days,
)
from bodyline.tracking.series import (
    DEFAULT_CALORIE_WINDOW_DAYS,
    average_daily_calories,
    sorted_by_date,
)

logger = logging.getLogger(__name__)

MIN_WEIGHT_ENTRIES = 2


@dataclass(frozen=True)
class ProjectionReport:
    """Projection plus goal analytics for one snapshot."""

    start_weight: float
    base_tdee: int
    avg_calories: int
    daily_deficit: float  # positive = deficit, negative = surplus
    tdee_estimated: bool  # True when no profile was available
    projection_days: int
    points: tuple[ProjectionDataPoint, ...]
    goal_weight: Optional[float]
    time_to_goal: Optional[GoalEstimate]
    progress: ProgressReport
    trajectory: tuple[TrajectoryPoint, ...]

    @property
    def final_weight(self) -> float:
        return self.points[-1].projected_weight

    @property
    def milestones(self) -> list[ProjectionDataPoint]:
        return [p for p in self.points if p.is_milestone]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "start_weight": self.start_weight,
            "base_tdee": self.base_tdee,
            "avg_calories": self.avg_calories,
            "daily_deficit": round(self.daily_deficit),
            "tdee_estimated": self.tdee_estimated,
            "projection_days": self.projection_days,
            "goal_weight": self.goal_weight,
            "time_to_goal": self.time_to_goal.to_dict() if self.time_to_goal else None,
            "progress": self.progress.to_dict(),
            "points": [p.to_dict() for p in self.points],
            "trajectory": [
                {"date": t.date.isoformat(), "target_weight": t.target_weight}
                for t in self.trajectory
            ],
        }


def build_projection_report(
    snapshot: Snapshot,
    *,
    today: date,
    timeframe: Union[ProjectionTimeframe, str] = ProjectionTimeframe.TWELVE_WEEKS,
    adherence: float = 1.0,
    adaptive_mode: bool = False,
    show_confidence_bands: bool = True,
    target_deficit: Optional[float] = None,
    optimistic_factor: float = DEFAULT_OPTIMISTIC_FACTOR,
    pessimistic_factor: float = DEFAULT_PESSIMISTIC_FACTOR,
    calorie_window_days: int = DEFAULT_CALORIE_WINDOW_DAYS,
) -> Optional[ProjectionReport]:
    """
    Build a projection report from raw entries.

    Args:
        snapshot: Weight entries, calorie logs, profile and goal
        today: Reference date (day 0 of the projection)
        timeframe: Projection horizon
        adherence: Fraction of the planned gap actually realised
        adaptive_mode: Hold the deficit constant as TDEE drifts
        show_confidence_bands: Also run optimistic/pessimistic projections
        target_deficit: Deficit to hold in adaptive mode; ignored otherwise
        optimistic_factor: Adherence multiplier for the optimistic band
        pessimistic_factor: Adherence multiplier for the pessimistic band
        calorie_window_days: Trailing window for the average intake

    Returns:
        ProjectionReport, or None with fewer than 2 weight entries or no
        calorie logs in the window
    """
    if len(snapshot.weights) < MIN_WEIGHT_ENTRIES:
        logger.debug("Not enough weight entries for a projection (%d)", len(snapshot.weights))
        return None

    avg_calories = average_daily_calories(snapshot.calories, today, calorie_window_days)
    if avg_calories is None:
        logger.debug("No calorie logs in the last %d days", calorie_window_days)
        return None

    ordered = sorted_by_date(snapshot.weights)
    first, latest = ordered[0], ordered[-1]

    base_tdee = baseline_tdee(latest.weight, snapshot.profile, today)
    # The target deficit only steers the simulation in adaptive mode
    if adaptive_mode and target_deficit is not None:
        daily_deficit = target_deficit
    else:
        daily_deficit = base_tdee - avg_calories
    days = timeframe_days(timeframe)

    points = project_with_bands(
        latest.weight,
        base_tdee,
        avg_calories,
        days,
        today=today,
        adherence=adherence,
        profile=snapshot.profile,
        adaptive_mode=adaptive_mode,
        target_deficit=target_deficit,
        show_confidence_bands=show_confidence_bands,
        optimistic_factor=optimistic_factor,
        pessimistic_factor=pessimistic_factor,
    )
    points = add_milestones(latest.weight, snapshot.goal_weight, points)

    return ProjectionReport(
        start_weight=latest.weight,
        base_tdee=base_tdee,
        avg_calories=avg_calories,
        daily_deficit=daily_deficit,
        tdee_estimated=snapshot.profile is None,
        projection_days=days,
        points=tuple(points),
        goal_weight=snapshot.goal_weight,
        time_to_goal=estimate_time_to_goal(
            latest.weight, snapshot.goal_weight, daily_deficit, today=today
        ),
        progress=calculate_target_weight_today(
            first, snapshot.goal_weight, latest.weight, daily_deficit, today=today
        ),
        trajectory=tuple(
            generate_target_trajectory(
                snapshot.weights, snapshot.goal_weight, daily_deficit, days, today=today
            )
        ),
    )


def format_projection_report(report: ProjectionReport) -> str:
    """Format projection report as text."""
    if report.daily_deficit > 0:
        balance = f"Deficit:        {report.daily_deficit:.0f} kcal/day"
    elif report.daily_deficit < 0:
        balance = f"Surplus:        {abs(report.daily_deficit):.0f} kcal/day"
    else:
        balance = "Balance:        maintenance"

    tdee_note = " (estimated, no profile)" if report.tdee_estimated else ""
    change = report.final_weight - report.start_weight

    lines = [
        f"Weight Projection ({report.projection_days} days)",
        "=" * 45,
        f"Current weight: {report.start_weight:.1f} kg",
        f"TDEE:           {report.base_tdee} kcal/day{tdee_note}",
        f"Avg intake:     {report.avg_calories} kcal/day",
        balance,
        f"Projected:      {report.final_weight:.1f} kg ({change:+.1f} kg)",
    ]

    if report.goal_weight is not None:
        lines.append("")
        lines.append(f"Progress toward goal ({report.goal_weight:.1f} kg)")
        lines.append("-" * 45)
        if report.time_to_goal:
            eta = report.time_to_goal
            lines.append(
                f"  Reach goal in {eta.days} days (~{eta.weeks} weeks), "
                f"around {eta.target_date.isoformat()}"
            )
        else:
            lines.append("  Goal not reachable at the current intake")

        progress = report.progress
        lines.append(
            f"  Status: {progress.status.value.replace('_', ' ')} "
            f"({progress.difference:+.1f} kg vs plan)"
        )
        for point in report.milestones:
            lines.append(
                f"  Milestone {point.milestone_label}: {point.date.isoformat()} "
                f"at {point.projected_weight:.1f} kg"
            )

    return "\n".join(lines)
