"""Tests for the day-by-day weight projection."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from bodyline.tracking.models import ProjectionTimeframe
from bodyline.tracking.projection import (
    CALORIES_PER_KG_FAT,
    estimate_lean_mass_gain,
    lean_ratio,
    max_daily_lean_gain,
    merge_projections,
    project_weight,
    project_with_bands,
    timeframe_days,
    timeframe_label,
)


def _deficit_run(today, days=84, **kwargs):
    """100 kg with a basic TDEE of 2700 eating 1930: 0.1 kg/day at first."""
    return project_weight(100.0, 2700, 1930, days, today=today, **kwargs)


class TestTimeframeDays:
    """Tests for horizon lookup."""

    @pytest.mark.parametrize(
        "timeframe,expected",
        [("4w", 28), ("8w", 56), ("12w", 84), ("6m", 182), ("1y", 365)],
    )
    def test_known_values(self, timeframe, expected) -> None:
        assert timeframe_days(timeframe) == expected

    def test_enum(self) -> None:
        assert timeframe_days(ProjectionTimeframe.SIX_MONTHS) == 182

    def test_unknown_defaults_to_twelve_weeks(self) -> None:
        assert timeframe_days("3d") == 84

    def test_labels(self) -> None:
        assert timeframe_label("4w") == "4 weeks"
        assert timeframe_label(ProjectionTimeframe.TWELVE_WEEKS) == "3 months"
        assert timeframe_label("1y") == "1 year"
        assert timeframe_label("3d") == "3 months"


class TestProjectWeight:
    """Tests for project_weight."""

    def test_returns_days_plus_one_points(self, today) -> None:
        points = _deficit_run(today, days=28)
        assert len(points) == 29
        assert [p.date for p in points] == [today + timedelta(days=d) for d in range(29)]

    def test_day_zero_is_start(self, today) -> None:
        """Day 0 is the anchor: no change applied yet."""
        points = project_weight(90.123, 2500, 2000, 14, today=today)
        assert points[0].projected_weight == 90.123
        assert points[0].tdee == 2500
        assert points[0].target_intake == 2000

    def test_zero_days(self, today) -> None:
        points = project_weight(90.0, 2500, 2000, 0, today=today)
        assert len(points) == 1
        assert points[0].projected_weight == 90.0

    def test_same_inputs_same_output(self, today, profile) -> None:
        first = _deficit_run(today, profile=profile, adaptive_mode=True)
        second = _deficit_run(today, profile=profile, adaptive_mode=True)
        assert first == second

    def test_first_day_change(self, today) -> None:
        """A 770 kcal gap is 0.1 kg."""
        points = _deficit_run(today, days=7)
        assert points[1].projected_weight == pytest.approx(99.9)
        assert points[6].projected_weight == pytest.approx(99.4)

    def test_tdee_changes_only_on_week_boundaries(self, today, profile) -> None:
        points = _deficit_run(today, days=60, profile=profile)
        for day in range(1, len(points)):
            if day % 7:
                assert points[day].tdee == points[day - 1].tdee

    def test_tdee_recalculated_from_simulated_weight(self, today) -> None:
        """Day 7 TDEE is 27 × 99.4 kg without a profile."""
        points = _deficit_run(today, days=14)
        assert points[6].tdee == 2700
        assert points[7].tdee == 2684

    def test_deficit_never_gains(self, today, profile) -> None:
        points = project_weight(95.0, 2800, 2200, 182, today=today, profile=profile)
        for prev, curr in zip(points, points[1:]):
            assert curr.projected_weight <= prev.projected_weight

    def test_fixed_intake_deficit_shrinks(self, today) -> None:
        """With fixed intake, loss slows as TDEE falls."""
        points = _deficit_run(today)
        first_week = points[0].projected_weight - points[7].projected_weight
        last_week = points[77].projected_weight - points[84].projected_weight
        assert last_week < first_week

    def test_fixed_intake_constant(self, today) -> None:
        points = _deficit_run(today)
        assert {p.target_intake for p in points} == {1930}

    def test_adaptive_mode_holds_deficit(self, today) -> None:
        points = _deficit_run(today, adaptive_mode=True)
        assert points[7].target_intake == points[7].tdee - 770
        assert points[84].target_intake == points[84].tdee - 770

    def test_adaptive_mode_with_target_deficit(self, today) -> None:
        points = _deficit_run(today, days=14, adaptive_mode=True, target_deficit=500)
        assert points[6].target_intake == 1930
        assert points[7].target_intake == 2184

    def test_adherence_scales_change(self, today) -> None:
        points = _deficit_run(today, days=1, adherence=0.5)
        assert points[1].projected_weight == pytest.approx(99.95)

    def test_zero_adherence_holds_weight(self, today) -> None:
        points = _deficit_run(today, days=30, adherence=0.0)
        assert all(p.projected_weight == 100.0 for p in points)

    def test_deficit_has_no_composition(self, today) -> None:
        points = _deficit_run(today, days=14)
        assert all(p.lean_mass_estimate is None for p in points)
        assert all(p.fat_mass_estimate is None for p in points)


class TestSurplusProjection:
    """Tests for lean/fat partitioning in a surplus."""

    def test_day_zero_has_no_composition(self, today) -> None:
        points = project_weight(70.0, 2500, 2800, 7, today=today)
        assert points[0].lean_mass_estimate is None
        assert points[1].lean_mass_estimate is not None
        assert points[1].fat_mass_estimate is not None

    def test_weight_increases(self, today) -> None:
        points = project_weight(70.0, 2500, 2800, 1, today=today)
        assert points[1].projected_weight == pytest.approx(70.0 + 300 / CALORIES_PER_KG_FAT)

    def test_lean_ratio_below_cap(self, today, profile) -> None:
        """A 300 kcal surplus at 5 training days stays under the cap."""
        trained = replace(profile, training_days_per_week=5)
        points = project_weight(70.0, 2500, 2800, 1, today=today, profile=trained)
        gain = 300 / CALORIES_PER_KG_FAT
        assert points[1].lean_mass_estimate == pytest.approx(0.7 * gain)
        assert points[1].fat_mass_estimate == pytest.approx(0.3 * gain)

    def test_no_profile_assumes_three_training_days(self, today) -> None:
        """Cap of 0.2 × 3/5 / 7 kg/day binds for a 300 kcal surplus."""
        points = project_weight(70.0, 2500, 2800, 1, today=today)
        assert points[1].lean_mass_estimate == pytest.approx(0.2 * 0.6 / 7)

    def test_lean_gain_never_exceeds_cap(self, today, profile) -> None:
        points = project_weight(70.0, 2500, 3500, 84, today=today, profile=profile)
        daily_cap = max_daily_lean_gain(profile.training_days_per_week)
        for day, point in enumerate(points[1:], start=1):
            assert point.lean_mass_estimate <= daily_cap * day + 1e-9

    def test_composition_sums_to_gain(self, today) -> None:
        points = project_weight(70.0, 2500, 3000, 28, today=today)
        final = points[-1]
        assert final.lean_mass_estimate + final.fat_mass_estimate == pytest.approx(
            final.projected_weight - 70.0
        )

    def test_lean_ratio_curve(self) -> None:
        assert lean_ratio(200) == 0.7
        assert lean_ratio(400) == 0.7
        assert lean_ratio(1000) == pytest.approx(0.3)
        assert lean_ratio(2000) == 0.2


class TestConfidenceBands:
    """Tests for merge_projections and project_with_bands."""

    def test_merge_attaches_band_weights(self, today) -> None:
        realistic = _deficit_run(today, days=7)
        optimistic = _deficit_run(today, days=7, adherence=1.1)
        pessimistic = _deficit_run(today, days=7, adherence=0.8)
        merged = merge_projections(realistic, optimistic, pessimistic)

        assert len(merged) == len(realistic)
        assert merged[7].optimistic_weight == optimistic[7].projected_weight
        assert merged[7].pessimistic_weight == pessimistic[7].projected_weight
        assert merged[7].projected_weight == realistic[7].projected_weight
        assert merged[7].tdee == realistic[7].tdee

    def test_merge_short_band_leaves_none(self, today) -> None:
        realistic = _deficit_run(today, days=7)
        merged = merge_projections(realistic, realistic[:3], [])
        assert merged[2].optimistic_weight is not None
        assert merged[3].optimistic_weight is None
        assert merged[0].pessimistic_weight is None

    def test_bands_order_for_deficit(self, today) -> None:
        points = project_with_bands(100.0, 2700, 1930, 84, today=today)
        final = points[-1]
        assert final.optimistic_weight < final.projected_weight < final.pessimistic_weight

    def test_bands_disabled(self, today) -> None:
        points = project_with_bands(
            100.0, 2700, 1930, 28, today=today, show_confidence_bands=False
        )
        assert all(p.optimistic_weight is None for p in points)
        assert points == _deficit_run(today, days=28)

    def test_optimistic_band_not_capped(self, today) -> None:
        """At full adherence the optimistic run uses adherence 1.1."""
        points = project_with_bands(100.0, 2700, 1930, 14, today=today)
        faster = _deficit_run(today, days=14, adherence=1.1)
        assert [p.optimistic_weight for p in points] == [p.projected_weight for p in faster]
        assert points[1].optimistic_weight == pytest.approx(99.89)

    def test_custom_factors(self, today) -> None:
        points = project_with_bands(
            100.0, 2700, 1930, 1, today=today,
            optimistic_factor=2.0, pessimistic_factor=0.5,
        )
        assert points[1].optimistic_weight == pytest.approx(99.8)
        assert points[1].pessimistic_weight == pytest.approx(99.95)


class TestEstimateLeanMassGain:
    """Tests for whole-period lean mass estimates."""

    def test_moderate_surplus(self) -> None:
        """4 weeks at +300 kcal/day with full training."""
        result = estimate_lean_mass_gain(300 * 28, 5, 4)
        assert result.lean_mass_kg == 0.76
        assert result.fat_mass_kg == 0.33

    def test_cap_applies(self) -> None:
        """Lean gain is capped at 0.2 kg/week × training factor."""
        result = estimate_lean_mass_gain(1000 * 28, 2, 4)
        assert result.lean_mass_kg == pytest.approx(0.32)

    def test_no_surplus(self) -> None:
        result = estimate_lean_mass_gain(-5000, 4, 4)
        assert result.lean_mass_kg == 0
        assert result.fat_mass_kg == 0
