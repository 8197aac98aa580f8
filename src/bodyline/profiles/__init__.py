"""Body metrics: BMR and TDEE calculation."""

from __future__ import annotations

from bodyline.profiles.body_calc import (
    ActivityLevel,
    Sex,
    baseline_tdee,
    calculate_age,
    calculate_bmr,
    calculate_tdee,
    estimate_basic_tdee,
    tdee_estimator_for,
)

__all__ = [
    "ActivityLevel",
    "Sex",
    "baseline_tdee",
    "calculate_age",
    "calculate_bmr",
    "calculate_tdee",
    "estimate_basic_tdee",
    "tdee_estimator_for",
]
