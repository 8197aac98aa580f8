"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".bodyline"


def default_config_path() -> Path:
    """Return the default config file path."""
    return _default_config_dir() / "config.yaml"


@dataclass
class ProjectionConfig:
    """Weight projection defaults."""

    timeframe: str = "12w"  # "4w", "8w", "12w", "6m", "1y"
    adherence: float = 1.0
    adaptive_mode: bool = False
    show_confidence_bands: bool = True
    optimistic_factor: float = 1.1
    pessimistic_factor: float = 0.8
    calorie_window_days: int = 14


@dataclass
class StreakConfig:
    """Logging streak defaults."""

    max_days: int = 30
    display_days: int = 14


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json"


@dataclass
class Settings:
    """Main application settings."""

    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    streak: StreakConfig = field(default_factory=StreakConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.bodyline/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse projection config
        if "projection" in data:
            proj_data = data["projection"] or {}
            proj = settings.projection
            if "timeframe" in proj_data:
                proj.timeframe = str(proj_data["timeframe"])
            if "adherence" in proj_data:
                proj.adherence = float(proj_data["adherence"])
            if "adaptive_mode" in proj_data:
                proj.adaptive_mode = bool(proj_data["adaptive_mode"])
            if "show_confidence_bands" in proj_data:
                proj.show_confidence_bands = bool(proj_data["show_confidence_bands"])
            if "optimistic_factor" in proj_data:
                proj.optimistic_factor = float(proj_data["optimistic_factor"])
            if "pessimistic_factor" in proj_data:
                proj.pessimistic_factor = float(proj_data["pessimistic_factor"])
            if "calorie_window_days" in proj_data:
                proj.calorie_window_days = int(proj_data["calorie_window_days"])

        # Parse streak config
        if "streak" in data:
            streak_data = data["streak"] or {}
            if "max_days" in streak_data:
                settings.streak.max_days = int(streak_data["max_days"])
            if "display_days" in streak_data:
                settings.streak.display_days = int(streak_data["display_days"])

        # Parse logging config
        if "logging" in data:
            log_data = data["logging"] or {}
            if "level" in log_data:
                settings.logging.level = str(log_data["level"]).upper()

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        return settings

    def to_dict(self) -> dict:
        """Return settings as a plain dict (the YAML layout)."""
        return {
            "projection": {
                "timeframe": self.projection.timeframe,
                "adherence": self.projection.adherence,
                "adaptive_mode": self.projection.adaptive_mode,
                "show_confidence_bands": self.projection.show_confidence_bands,
                "optimistic_factor": self.projection.optimistic_factor,
                "pessimistic_factor": self.projection.pessimistic_factor,
                "calorie_window_days": self.projection.calorie_window_days,
            },
            "streak": {
                "max_days": self.streak.max_days,
                "display_days": self.streak.display_days,
            },
            "logging": {
                "level": self.logging.level,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.bodyline/config.yaml

        Returns:
            Path written to
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        return config_path


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
