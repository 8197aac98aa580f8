"""Data models for weight projection and streak tracking."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional

from bodyline.profiles.body_calc import ActivityLevel, Sex

# Default number of training days assumed when no profile is available
DEFAULT_TRAINING_DAYS = 3


class ProgressStatus(Enum):
    """Actual vs expected progress toward a goal weight."""
    AHEAD = "ahead"
    ON_TRACK = "on_track"
    BEHIND = "behind"
    NO_GOAL = "no_goal"


class WeightTrend(Enum):
    """Direction of recent weight entries."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ProjectionTimeframe(Enum):
    """Projection horizon options."""
    FOUR_WEEKS = "4w"
    EIGHT_WEEKS = "8w"
    TWELVE_WEEKS = "12w"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"

    @property
    def days(self) -> int:
        return _TIMEFRAME_DAYS[self]

    @property
    def label(self) -> str:
        return _TIMEFRAME_LABELS[self]


_TIMEFRAME_DAYS = {
    ProjectionTimeframe.FOUR_WEEKS: 28,
    ProjectionTimeframe.EIGHT_WEEKS: 56,
    ProjectionTimeframe.TWELVE_WEEKS: 84,
    ProjectionTimeframe.SIX_MONTHS: 182,
    ProjectionTimeframe.ONE_YEAR: 365,
}

_TIMEFRAME_LABELS = {
    ProjectionTimeframe.FOUR_WEEKS: "4 weeks",
    ProjectionTimeframe.EIGHT_WEEKS: "8 weeks",
    ProjectionTimeframe.TWELVE_WEEKS: "3 months",
    ProjectionTimeframe.SIX_MONTHS: "6 months",
    ProjectionTimeframe.ONE_YEAR: "1 year",
}


def _round2(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class WeightEntry:
    """A single weight log entry."""

    date: date
    weight: float  # kg


@dataclass(frozen=True)
class CalorieLog:
    """A single day's logged calorie intake."""

    date: date
    calories: int


@dataclass(frozen=True)
class UserProfile:
    """Body profile used for Mifflin-St Jeor TDEE calculations."""

    height_cm: float
    birth_date: date
    biological_sex: Sex
    activity_level: ActivityLevel
    training_days_per_week: int = DEFAULT_TRAINING_DAYS
    tdee_override: Optional[int] = None

    def __post_init__(self) -> None:
        # Accept plain strings from loaded data
        try:
            object.__setattr__(self, "biological_sex", Sex(self.biological_sex))
        except ValueError:
            raise ValueError(
                f"biological_sex must be 'male' or 'female', got '{self.biological_sex}'"
            ) from None
        try:
            object.__setattr__(self, "activity_level", ActivityLevel(self.activity_level))
        except ValueError:
            valid_levels = tuple(level.value for level in ActivityLevel)
            raise ValueError(
                f"activity_level must be one of {valid_levels}, got '{self.activity_level}'"
            ) from None
        if not 0 <= self.training_days_per_week <= 7:
            raise ValueError(
                "training_days_per_week must be between 0 and 7, "
                f"got {self.training_days_per_week}"
            )


@dataclass(frozen=True)
class ProjectionDataPoint:
    """One simulated day of a weight projection.

    ``tdee`` and ``target_intake`` are the values in effect since the most
    recent weekly recalculation. Body composition fields are only set for
    surplus scenarios.
    """

    date: date
    projected_weight: float
    tdee: int
    target_intake: int
    optimistic_weight: Optional[float] = None
    pessimistic_weight: Optional[float] = None
    lean_mass_estimate: Optional[float] = None
    fat_mass_estimate: Optional[float] = None
    is_milestone: bool = False
    milestone_label: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        data: dict[str, Any] = {
            "date": self.date.isoformat(),
            "projected_weight": _round2(self.projected_weight),
            "tdee": self.tdee,
            "target_intake": self.target_intake,
        }
        if self.optimistic_weight is not None:
            data["optimistic_weight"] = _round2(self.optimistic_weight)
        if self.pessimistic_weight is not None:
            data["pessimistic_weight"] = _round2(self.pessimistic_weight)
        if self.lean_mass_estimate is not None:
            data["lean_mass_estimate"] = _round2(self.lean_mass_estimate)
        if self.fat_mass_estimate is not None:
            data["fat_mass_estimate"] = _round2(self.fat_mass_estimate)
        if self.is_milestone:
            data["is_milestone"] = True
            data["milestone_label"] = self.milestone_label
        return data


@dataclass(frozen=True)
class StreakDay:
    """A day shown in the streak display."""

    date: date
    logged: bool
    is_grace_day: bool = False


@dataclass(frozen=True)
class StreakResult:
    """Outcome of a streak scan."""

    count: int
    grace_day_used: bool
    recent_days: tuple[StreakDay, ...]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "count": self.count,
            "grace_day_used": self.grace_day_used,
            "recent_days": [
                {
                    "date": day.date.isoformat(),
                    "logged": day.logged,
                    "is_grace_day": day.is_grace_day,
                }
                for day in self.recent_days
            ],
        }


@dataclass(frozen=True)
class GoalEstimate:
    """Estimated time to reach a goal weight."""

    days: int
    weeks: int
    target_date: date

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "days": self.days,
            "weeks": self.weeks,
            "date": self.target_date.isoformat(),
        }


@dataclass(frozen=True)
class ProgressReport:
    """Where weight should be today vs where it is.

    ``difference`` is positive when ahead of the plan.
    """

    target_weight: Optional[float]
    difference: float
    status: ProgressStatus
    days_elapsed: int
    expected_change: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "target_weight": self.target_weight,
            "difference": self.difference,
            "status": self.status.value,
            "days_elapsed": self.days_elapsed,
            "expected_change": self.expected_change,
        }


@dataclass(frozen=True)
class TrajectoryPoint:
    """Expected weight on a day of the straight-line plan."""

    date: date
    target_weight: float


@dataclass(frozen=True)
class LeanMassEstimate:
    """Lean vs fat split of a period's mass gain."""

    lean_mass_kg: float
    fat_mass_kg: float


@dataclass(frozen=True)
class Snapshot:
    """Everything the engine reads: entries, optional profile and goal."""

    weights: tuple[WeightEntry, ...] = ()
    calories: tuple[CalorieLog, ...] = ()
    profile: Optional[UserProfile] = None
    goal_weight: Optional[float] = None
