"""Tests for logging streaks with a grace day."""

from __future__ import annotations

from datetime import timedelta

from bodyline.tracking.streaks import calculate_streak_with_grace


def _days_ago(today, *offsets):
    return {today - timedelta(days=d) for d in offsets}


class TestStreakWithGrace:
    """Tests for calculate_streak_with_grace."""

    def test_grace_bridges_single_gap(self, today) -> None:
        result = calculate_streak_with_grace(_days_ago(today, 0, 1, 3, 4), today=today)
        assert result.count == 4
        assert result.grace_day_used is True

    def test_grace_day_tagged(self, today) -> None:
        result = calculate_streak_with_grace(_days_ago(today, 0, 1, 3, 4), today=today)
        gap = result.recent_days[2]
        assert gap.date == today - timedelta(days=2)
        assert gap.is_grace_day
        assert not gap.logged

    def test_grace_after_today_only(self, today) -> None:
        result = calculate_streak_with_grace(_days_ago(today, 0, 2), today=today)
        assert result.count == 2
        assert result.grace_day_used is True

    def test_two_misses_end_streak(self, today) -> None:
        result = calculate_streak_with_grace(_days_ago(today, 0), today=today)
        assert result.count == 1
        assert result.grace_day_used is False

    def test_second_gap_ends_streak(self, today) -> None:
        result = calculate_streak_with_grace(_days_ago(today, 0, 2, 3, 5, 6), today=today)
        assert result.count == 3
        assert result.grace_day_used is True

    def test_today_unlogged_does_not_break(self, today) -> None:
        result = calculate_streak_with_grace(_days_ago(today, 1, 2), today=today)
        assert result.count == 2
        assert result.grace_day_used is False
        assert result.recent_days[0].date == today
        assert not result.recent_days[0].logged

    def test_no_grace_without_streak(self, today) -> None:
        """A miss before any logged day stops the scan."""
        result = calculate_streak_with_grace(_days_ago(today, 2, 3), today=today)
        assert result.count == 0
        assert result.grace_day_used is False

    def test_nothing_logged(self, today) -> None:
        result = calculate_streak_with_grace(set(), today=today)
        assert result.count == 0
        assert [d.date for d in result.recent_days] == [today, today - timedelta(days=1)]

    def test_bounded_by_max_days(self, today) -> None:
        every_day = _days_ago(today, *range(100))
        assert calculate_streak_with_grace(every_day, today=today).count == 30
        assert calculate_streak_with_grace(every_day, today=today, max_days=10).count == 10

    def test_display_limited(self, today) -> None:
        every_day = _days_ago(today, *range(100))
        result = calculate_streak_with_grace(every_day, today=today)
        assert len(result.recent_days) == 14
        assert result.recent_days[0].date == today
        assert result.recent_days[-1].date == today - timedelta(days=13)

    def test_accepts_duplicates(self, today) -> None:
        dates = [today, today, today - timedelta(days=1)]
        assert calculate_streak_with_grace(dates, today=today).count == 2

    def test_to_dict(self, today) -> None:
        data = calculate_streak_with_grace(_days_ago(today, 0, 2), today=today).to_dict()
        assert data["count"] == 2
        assert data["grace_day_used"] is True
        assert data["recent_days"][1] == {
            "date": (today - timedelta(days=1)).isoformat(),
            "logged": False,
            "is_grace_day": True,
        }
