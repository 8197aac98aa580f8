"""Pytest fixtures for bodyline tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
import yaml

from bodyline.profiles.body_calc import ActivityLevel, Sex
from bodyline.tracking.models import CalorieLog, Snapshot, UserProfile, WeightEntry


@pytest.fixture
def today() -> date:
    """Fixed reference date so results don't depend on the clock."""
    return date(2025, 6, 15)


@pytest.fixture
def profile() -> UserProfile:
    """A 35-year-old moderately active male, 180 cm."""
    return UserProfile(
        height_cm=180,
        birth_date=date(1990, 3, 1),
        biological_sex=Sex.MALE,
        activity_level=ActivityLevel.MODERATE,
        training_days_per_week=4,
    )


@pytest.fixture
def weights(today) -> list[WeightEntry]:
    """Four weeks of slowly falling weights, deliberately out of order."""
    entries = [
        WeightEntry(today - timedelta(days=days_ago), 92.0 - (28 - days_ago) * 0.05)
        for days_ago in range(0, 29, 2)
    ]
    return entries[::2] + entries[1::2]


@pytest.fixture
def calories(today) -> list[CalorieLog]:
    """Three weeks of intake averaging 2200 kcal/day."""
    return [
        CalorieLog(today - timedelta(days=days_ago), 2100 if days_ago % 2 else 2300)
        for days_ago in range(0, 20)
    ]


@pytest.fixture
def snapshot(weights, calories, profile) -> Snapshot:
    """Snapshot with a profile and a weight-loss goal."""
    return Snapshot(
        weights=tuple(weights),
        calories=tuple(calories),
        profile=profile,
        goal_weight=85.0,
    )


@pytest.fixture
def snapshot_file(tmp_path, today):
    """Write a snapshot YAML file and return its path."""
    data = {
        "goal_weight": 85.0,
        "profile": {
            "height_cm": 180,
            "birth_date": "1990-03-01",
            "biological_sex": "male",
            "activity_level": "moderate",
            "training_days_per_week": 4,
        },
        "weights": [
            {"date": (today - timedelta(days=d)).isoformat(), "weight": 90.0 + d * 0.1}
            for d in range(0, 21, 3)
        ],
        "calories": [
            {"date": (today - timedelta(days=d)).isoformat(), "calories": 2200}
            for d in range(0, 10)
        ],
    }
    path = tmp_path / "snapshot.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path
