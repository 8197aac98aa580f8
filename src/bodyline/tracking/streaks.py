"""Logging streaks with a single forgiven day.

The scan walks backward one day at a time from today. Today counts if it
is logged, but an unlogged today doesn't end anything since the day isn't
over yet. Walking back, a logged day extends the streak. One missed day
(the grace day) is forgiven if a streak is already running and the day
before the gap is logged, so it bridges two logged stretches. Any other
miss ends the scan.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from bodyline.tracking.models import StreakDay, StreakResult

DEFAULT_MAX_DAYS = 30
DEFAULT_DISPLAY_DAYS = 14


@dataclass
class _StreakScan:
    """Scan state: streak length, consecutive misses, grace spent."""

    logged: frozenset[date]
    streak: int = 0
    misses: int = 0
    grace_used: bool = False
    days: list[StreakDay] = field(default_factory=list)

    def visit(self, day: date) -> bool:
        """Process one day; return False when the streak has ended."""
        if day in self.logged:
            self.streak += 1
            self.misses = 0
            self.days.append(StreakDay(day, logged=True))
            return True

        self.misses += 1
        if self._can_use_grace(day):
            self.grace_used = True
            self.days.append(StreakDay(day, logged=False, is_grace_day=True))
            return True

        self.days.append(StreakDay(day, logged=False))
        return False

    def _can_use_grace(self, day: date) -> bool:
        return (
            self.misses == 1
            and not self.grace_used
            and self.streak > 0
            and day - timedelta(days=1) in self.logged
        )


def calculate_streak_with_grace(
    logged_dates: Iterable[date],
    *,
    today: date,
    max_days: int = DEFAULT_MAX_DAYS,
    display_days: int = DEFAULT_DISPLAY_DAYS,
) -> StreakResult:
    """
    Count the current logging streak, forgiving at most one missed day.

    Args:
        logged_dates: Dates with at least one log
        today: Day the scan starts from
        max_days: How many days back to look, today included
        display_days: How many of the most recent days to return

    Returns:
        StreakResult with the count, whether the grace day was used, and
        the most recent days tagged logged / grace / missed
    """
    scan = _StreakScan(logged=frozenset(logged_dates))

    if today in scan.logged:
        scan.streak = 1
    scan.days.append(StreakDay(today, logged=today in scan.logged))

    for offset in range(1, max_days):
        if not scan.visit(today - timedelta(days=offset)):
            break

    return StreakResult(
        count=scan.streak,
        grace_day_used=scan.grace_used,
        recent_days=tuple(scan.days[:display_days]),
    )
