"""Helpers for date-keyed weight and calorie series.

Series arrive unordered from storage. Every helper here sorts a local copy
before looking at order and never mutates the caller's sequence.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Optional, Protocol, TypeVar

from bodyline.tracking.models import CalorieLog, WeightEntry, WeightTrend

# Trailing window for the average intake used by projections
DEFAULT_CALORIE_WINDOW_DAYS = 14

# Weight change below which the trend counts as stable (kg)
STABLE_TREND_THRESHOLD = 0.3


class Dated(Protocol):
    @property
    def date(self) -> date: ...


D = TypeVar("D", bound=Dated)


def sorted_by_date(entries: Iterable[D], newest_first: bool = False) -> list[D]:
    """Return a new list of entries ordered by date."""
    return sorted(entries, key=lambda e: e.date, reverse=newest_first)


def latest_entry(entries: Iterable[D]) -> Optional[D]:
    """Most recent entry, or None when there are none."""
    return max(entries, key=lambda e: e.date, default=None)


def first_entry(entries: Iterable[D]) -> Optional[D]:
    """Earliest entry, or None when there are none."""
    return min(entries, key=lambda e: e.date, default=None)


def logged_dates(*series: Iterable[Dated]) -> set[date]:
    """Collect every date that carries at least one entry."""
    return {entry.date for entries in series for entry in entries}


def average_daily_calories(
    logs: Iterable[CalorieLog],
    today: date,
    days: int = DEFAULT_CALORIE_WINDOW_DAYS,
) -> Optional[int]:
    """
    Average logged intake over the trailing window.

    Args:
        logs: Calorie logs in any order
        today: Reference date for the window
        days: Window length; logs dated on or after ``today - days`` count

    Returns:
        Rounded mean kcal/day, or None if no logs fall in the window
    """
    cutoff = today - timedelta(days=days)
    recent = [log.calories for log in logs if log.date >= cutoff]
    if not recent:
        return None
    return round(sum(recent) / len(recent))


def rolling_average(weights: Iterable[WeightEntry], days: int) -> Optional[float]:
    """Mean of the ``days`` most recent weight entries, to 0.1 kg."""
    recent = sorted_by_date(weights, newest_first=True)[:days]
    if not recent:
        return None
    return round(sum(w.weight for w in recent) / len(recent), 1)


def weight_trend(weights: Sequence[WeightEntry]) -> Optional[WeightTrend]:
    """
    Compare the last 3 entries against the 3 before them.

    Returns:
        Trend direction, or None with fewer than 4 entries to compare
    """
    if len(weights) < 3:
        return None

    ordered = sorted_by_date(weights, newest_first=True)
    recent = ordered[:3]
    previous = ordered[3:6]
    if not previous:
        return None

    recent_avg = sum(w.weight for w in recent) / len(recent)
    previous_avg = sum(w.weight for w in previous) / len(previous)
    diff = recent_avg - previous_avg

    if abs(diff) < STABLE_TREND_THRESHOLD:
        return WeightTrend.STABLE
    return WeightTrend.UP if diff > 0 else WeightTrend.DOWN


def progress_to_goal(current: float, goal: float, start: Optional[float] = None) -> float:
    """
    Percent of the distance from start to goal already covered.

    Without a known start, assumes the start was 10 kg further from the
    goal than the current weight.

    Returns:
        Progress in percent, clamped to [0, 100]
    """
    if start is None:
        start = current - 10 if goal > current else current + 10
    total_distance = abs(start - goal)
    if total_distance == 0:
        return 100.0
    current_distance = abs(current - goal)
    progress = (total_distance - current_distance) / total_distance * 100
    return max(0.0, min(100.0, progress))
