"""Load weight and calorie logs from snapshot files and CSV exports."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import yaml

from bodyline.tracking.models import CalorieLog, Snapshot, UserProfile, WeightEntry

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIXES = (".yaml", ".yml", ".json")


def _parse_date(value: Any, field_name: str) -> date:
    """Accept date objects (YAML parses bare ISO dates) or ISO strings."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValueError(f"Invalid {field_name}: '{value}' (expected YYYY-MM-DD)") from None


def _parse_profile(data: Optional[dict]) -> Optional[UserProfile]:
    if not data:
        return None

    missing = {"height_cm", "birth_date", "biological_sex", "activity_level"} - set(data)
    if missing:
        raise ValueError(f"Profile is missing required fields: {sorted(missing)}")

    override = data.get("tdee_override")
    return UserProfile(
        height_cm=float(data["height_cm"]),
        birth_date=_parse_date(data["birth_date"], "birth_date"),
        biological_sex=data["biological_sex"],
        activity_level=data["activity_level"],
        training_days_per_week=int(data.get("training_days_per_week", 3)),
        tdee_override=int(override) if override else None,
    )


def snapshot_from_dict(data: dict) -> Snapshot:
    """Build a Snapshot from its plain-dict form.

    Args:
        data: Dict with ``weights``, ``calories``, ``profile`` and
              ``goal_weight`` keys (all optional)

    Returns:
        Snapshot

    Raises:
        ValueError: If an entry is malformed
    """
    weights = []
    for row in data.get("weights") or []:
        if "date" not in row or "weight" not in row:
            raise ValueError(f"Weight entry needs 'date' and 'weight': {row}")
        weights.append(WeightEntry(_parse_date(row["date"], "date"), float(row["weight"])))

    calories = []
    for row in data.get("calories") or []:
        if "date" not in row or "calories" not in row:
            raise ValueError(f"Calorie entry needs 'date' and 'calories': {row}")
        calories.append(CalorieLog(_parse_date(row["date"], "date"), int(row["calories"])))

    goal_weight = data.get("goal_weight")
    return Snapshot(
        weights=tuple(weights),
        calories=tuple(calories),
        profile=_parse_profile(data.get("profile")),
        goal_weight=float(goal_weight) if goal_weight is not None else None,
    )


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    """Convert a Snapshot to its plain-dict form."""
    profile = None
    if snapshot.profile is not None:
        p = snapshot.profile
        profile = {
            "height_cm": p.height_cm,
            "birth_date": p.birth_date.isoformat(),
            "biological_sex": p.biological_sex.value,
            "activity_level": p.activity_level.value,
            "training_days_per_week": p.training_days_per_week,
            "tdee_override": p.tdee_override,
        }

    return {
        "goal_weight": snapshot.goal_weight,
        "profile": profile,
        "weights": [
            {"date": w.date.isoformat(), "weight": w.weight} for w in snapshot.weights
        ],
        "calories": [
            {"date": c.date.isoformat(), "calories": c.calories} for c in snapshot.calories
        ],
    }


def load_snapshot(path: Path) -> Snapshot:
    """Load a snapshot from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file type or content is invalid
    """
    if path.suffix.lower() not in SNAPSHOT_SUFFIXES:
        raise ValueError(
            f"Unsupported snapshot file '{path.name}'. "
            f"Expected one of: {', '.join(SNAPSHOT_SUFFIXES)}"
        )

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid snapshot file '{path.name}': {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Snapshot file '{path.name}' must contain a mapping")

    snapshot = snapshot_from_dict(data)
    logger.debug(
        "Loaded %d weight entries and %d calorie logs from %s",
        len(snapshot.weights), len(snapshot.calories), path,
    )
    return snapshot


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write a snapshot to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(snapshot_to_dict(snapshot), f, default_flow_style=False, sort_keys=False)


class LogLoader:
    """Handles importing weight and calorie logs from CSV exports."""

    WEIGHT_COLUMNS = ["date", "weight"]
    CALORIE_COLUMNS = ["date", "calories"]

    def __init__(self) -> None:
        self.skipped = 0

    def load_weights_csv(self, csv_path: Path) -> list[WeightEntry]:
        """Load weight entries from a CSV file.

        CSV format:
            date,weight
            2025-01-15,82.4

        Args:
            csv_path: Path to the CSV file

        Returns:
            Weight entries in file order

        Raises:
            ValueError: If required columns are missing
        """
        df = self._read(csv_path, self.WEIGHT_COLUMNS)
        return [
            WeightEntry(_parse_date(row["date"], "date"), float(row["weight"]))
            for _, row in df.iterrows()
        ]

    def load_calories_csv(self, csv_path: Path) -> list[CalorieLog]:
        """Load calorie logs from a CSV file.

        CSV format:
            date,calories
            2025-01-15,2150

        Raises:
            ValueError: If required columns are missing
        """
        df = self._read(csv_path, self.CALORIE_COLUMNS)
        return [
            CalorieLog(_parse_date(row["date"], "date"), int(round(row["calories"])))
            for _, row in df.iterrows()
        ]

    def _read(self, csv_path: Path, required: list[str]) -> pd.DataFrame:
        """Read a CSV, check columns and drop rows with blank values."""
        df = pd.read_csv(csv_path)
        df.columns = [str(c).strip().lower() for c in df.columns]

        missing = set(required) - set(df.columns)
        if missing:
            raise ValueError(
                f"Missing required columns: {sorted(missing)}. "
                f"Required columns are: {required}"
            )

        complete = df.dropna(subset=required)
        skipped = len(df) - len(complete)
        if skipped:
            logger.debug("Skipped %d incomplete rows in %s", skipped, csv_path)
        self.skipped += skipped
        return complete
