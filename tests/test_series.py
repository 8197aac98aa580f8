"""Tests for series helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from bodyline.tracking.models import CalorieLog, WeightEntry, WeightTrend
from bodyline.tracking.series import (
    average_daily_calories,
    first_entry,
    latest_entry,
    logged_dates,
    progress_to_goal,
    rolling_average,
    sorted_by_date,
    weight_trend,
)


class TestOrdering:
    """Tests for sorting and first/latest lookups."""

    def test_sorted_copy(self, weights) -> None:
        original = list(weights)
        ordered = sorted_by_date(weights)
        assert [w.date for w in ordered] == sorted(w.date for w in weights)
        assert weights == original

    def test_newest_first(self, weights, today) -> None:
        assert sorted_by_date(weights, newest_first=True)[0].date == today

    def test_latest_and_first(self, weights, today) -> None:
        assert latest_entry(weights).weight == pytest.approx(90.6)
        assert first_entry(weights).date == today - timedelta(days=28)

    def test_empty(self) -> None:
        assert latest_entry([]) is None
        assert first_entry([]) is None

    def test_logged_dates(self, weights, calories, today) -> None:
        dates = logged_dates(weights, calories)
        assert today - timedelta(days=28) in dates
        assert today - timedelta(days=19) in dates
        assert len(dates) == 25


class TestAverageDailyCalories:
    """Tests for the trailing intake average."""

    def test_window(self, calories, today) -> None:
        """15 logs fall in the 14-day window: 8 × 2300 and 7 × 2100."""
        assert average_daily_calories(calories, today) == 2207

    def test_custom_window(self, calories, today) -> None:
        assert average_daily_calories(calories, today, days=0) == 2300

    def test_none_in_window(self, today) -> None:
        old = [CalorieLog(today - timedelta(days=30), 2000)]
        assert average_daily_calories(old, today) is None


class TestWeightStats:
    """Tests for rolling averages and trends."""

    def test_rolling_average(self, today) -> None:
        entries = [WeightEntry(today - timedelta(days=d), 80.0 + d) for d in range(5)]
        assert rolling_average(entries, 3) == 81.0
        assert rolling_average([], 7) is None

    def test_trend_down(self, today) -> None:
        entries = [WeightEntry(today - timedelta(days=d), 80.0 + d * 0.2) for d in range(6)]
        assert weight_trend(entries) == WeightTrend.DOWN

    def test_trend_up(self, today) -> None:
        entries = [WeightEntry(today - timedelta(days=d), 80.0 - d * 0.2) for d in range(6)]
        assert weight_trend(entries) == WeightTrend.UP

    def test_trend_stable(self, today) -> None:
        entries = [WeightEntry(today - timedelta(days=d), 80.0) for d in range(6)]
        assert weight_trend(entries) == WeightTrend.STABLE

    def test_trend_needs_history(self, today) -> None:
        entries = [WeightEntry(today - timedelta(days=d), 80.0) for d in range(3)]
        assert weight_trend(entries) is None
        assert weight_trend(entries[:2]) is None


class TestProgressToGoal:
    """Tests for percent progress."""

    def test_with_start(self) -> None:
        assert progress_to_goal(85, 80, start=90) == 50.0

    def test_assumed_start(self) -> None:
        """Start assumed 10 kg further from the goal."""
        assert progress_to_goal(85, 80) == pytest.approx(200 / 3)
        assert progress_to_goal(70, 75) == pytest.approx(200 / 3)

    def test_clamped(self) -> None:
        assert progress_to_goal(95, 80, start=90) == 0.0
        assert progress_to_goal(78, 80, start=90) == 80.0

    def test_at_start_and_goal(self) -> None:
        assert progress_to_goal(80, 80, start=80) == 100.0
        assert progress_to_goal(80, 80) == 100.0
