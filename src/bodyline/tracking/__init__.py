"""Weight projection and logging streak module.

This module simulates body weight forward from recent calorie intake,
re-estimating TDEE weekly as the simulated weight changes, and derives
goal analytics from the result. It also tracks logging streaks with a
single forgiven day.

Key components:
- Day-by-day energy-balance projection with confidence bands
- Milestones, time-to-goal, target trajectory and progress status
- Streak tracking with one grace day
"""

from __future__ import annotations

from bodyline.tracking.analytics import (
    add_milestones,
    calculate_target_weight_today,
    estimate_time_to_goal,
    generate_target_trajectory,
)
from bodyline.tracking.models import (
    CalorieLog,
    ProgressStatus,
    ProjectionDataPoint,
    ProjectionTimeframe,
    Snapshot,
    StreakResult,
    UserProfile,
    WeightEntry,
)
from bodyline.tracking.projection import merge_projections, project_weight
from bodyline.tracking.report import build_projection_report
from bodyline.tracking.streaks import calculate_streak_with_grace

__all__ = [
    "CalorieLog",
    "ProgressStatus",
    "ProjectionDataPoint",
    "ProjectionTimeframe",
    "Snapshot",
    "StreakResult",
    "UserProfile",
    "WeightEntry",
    "add_milestones",
    "build_projection_report",
    "calculate_streak_with_grace",
    "calculate_target_weight_today",
    "estimate_time_to_goal",
    "generate_target_trajectory",
    "merge_projections",
    "project_weight",
]
