"""Metabolic calculator for BMR and TDEE.

Calculates TDEE (Total Daily Energy Expenditure) from body metrics, or a
rough weight-only estimate when no profile is available.

Uses Mifflin-St Jeor equation for BMR as it's widely validated for
calculating resting metabolic rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Union

if TYPE_CHECKING:
    from bodyline.tracking.models import UserProfile


class Sex(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(Enum):
    """Activity level multipliers for TDEE calculation."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    ACTIVE = "active"                # Hard exercise 6-7 days/week
    VERY_ACTIVE = "very_active"      # Very hard exercise, physical job


# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

ACTIVITY_DESCRIPTIONS = {
    ActivityLevel.SEDENTARY: "Little or no exercise, desk job",
    ActivityLevel.LIGHT: "Light exercise 1-3 days/week",
    ActivityLevel.MODERATE: "Moderate exercise 3-5 days/week",
    ActivityLevel.ACTIVE: "Hard exercise 6-7 days/week",
    ActivityLevel.VERY_ACTIVE: "Very hard exercise, physical job",
}

# kcal per kg of body weight for the no-profile estimate (25-30 is typical
# for moderately active adults)
BASIC_TDEE_KCAL_PER_KG = 27


def calculate_age(birth_date: date, today: date) -> int:
    """Return age in whole years as of ``today``."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def calculate_bmr(
    weight_kg: float,
    height_cm: float,
    age_years: int,
    sex: Union[Sex, str],
) -> float:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        weight_kg: Weight in kilograms
        height_cm: Height in centimetres
        age_years: Age in years
        sex: Biological sex

    Returns:
        BMR in calories per day
    """
    sex = Sex(sex)
    base = (10 * weight_kg) + (6.25 * height_cm) - (5 * age_years)
    if sex == Sex.MALE:
        return base + 5
    return base - 161


def activity_multiplier(activity_level: Union[ActivityLevel, str]) -> float:
    """Return the TDEE multiplier for an activity level."""
    return ACTIVITY_MULTIPLIERS[ActivityLevel(activity_level)]


def calculate_tdee(
    weight_kg: float,
    height_cm: float,
    age_years: int,
    sex: Union[Sex, str],
    activity_level: Union[ActivityLevel, str],
    override: Optional[int] = None,
) -> int:
    """Calculate Total Daily Energy Expenditure.

    A manual override, when set, is returned unchanged.

    Args:
        weight_kg: Weight in kilograms
        height_cm: Height in centimetres
        age_years: Age in years
        sex: Biological sex
        activity_level: Activity level
        override: Manually entered TDEE

    Returns:
        TDEE in calories per day
    """
    if override:
        return override
    bmr = calculate_bmr(weight_kg, height_cm, age_years, sex)
    return round(bmr * activity_multiplier(activity_level))


def estimate_basic_tdee(weight_kg: float) -> int:
    """Rough TDEE from weight alone, for users without a profile."""
    return round(weight_kg * BASIC_TDEE_KCAL_PER_KG)


def calculate_adaptive_intake(
    weight_kg: float,
    profile: UserProfile,
    target_deficit: float,
    today: date,
) -> int:
    """Intake that keeps ``target_deficit`` at the given weight."""
    tdee = calculate_tdee(
        weight_kg,
        profile.height_cm,
        calculate_age(profile.birth_date, today),
        profile.biological_sex,
        profile.activity_level,
        profile.tdee_override,
    )
    return round(tdee - target_deficit)


class TDEEEstimator(Protocol):
    """Re-estimates TDEE for a simulated body weight."""

    def estimate(self, weight_kg: float) -> int: ...


@dataclass(frozen=True)
class ProfileTDEE:
    """Mifflin-St Jeor TDEE from a user profile, ignoring any override."""

    profile: UserProfile
    today: date

    def estimate(self, weight_kg: float) -> int:
        return calculate_tdee(
            weight_kg,
            self.profile.height_cm,
            calculate_age(self.profile.birth_date, self.today),
            self.profile.biological_sex,
            self.profile.activity_level,
        )


@dataclass(frozen=True)
class BasicTDEE:
    """Weight-only TDEE estimate."""

    def estimate(self, weight_kg: float) -> int:
        return estimate_basic_tdee(weight_kg)


def tdee_estimator_for(profile: Optional[UserProfile], today: date) -> TDEEEstimator:
    """Pick the TDEE strategy used when the simulated weight changes.

    A profile with a manual override has no formula to track weight with,
    so it falls back to the weight-only estimate like a missing profile.
    """
    if profile is not None and not profile.tdee_override:
        return ProfileTDEE(profile, today)
    return BasicTDEE()


def baseline_tdee(
    weight_kg: float,
    profile: Optional[UserProfile],
    today: date,
) -> int:
    """Starting TDEE for a projection, honouring a manual override."""
    if profile is None:
        return estimate_basic_tdee(weight_kg)
    return calculate_tdee(
        weight_kg,
        profile.height_cm,
        calculate_age(profile.birth_date, today),
        profile.biological_sex,
        profile.activity_level,
        profile.tdee_override,
    )
