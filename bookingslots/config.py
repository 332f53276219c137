"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import BookingSettings

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BookingDefaults(BaseModel):
    """Booking policy applied to providers that store no settings of their own."""
    min_notice_hours: float = 2
    max_advance_days: int = 60
    default_buffer_minutes: int = 0
    next_available_horizon_days: int = 60

    @field_validator("min_notice_hours")
    @classmethod
    def validate_notice(cls, value: float) -> float:
        """Ensure the minimum notice is not negative."""
        if value < 0:
            raise ValueError("min_notice_hours must not be negative")
        return value

    @field_validator("max_advance_days", "next_available_horizon_days")
    @classmethod
    def validate_days(cls, value: int) -> int:
        """Ensure look-ahead windows are positive."""
        if value <= 0:
            raise ValueError(f"Day window must be greater than zero, got {value}")
        return value

    @field_validator("default_buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        if not 0 <= value <= 120:
            raise ValueError(f"default_buffer_minutes must be between 0 and 120, got {value}")
        return value

    def to_settings(self) -> BookingSettings:
        return BookingSettings(
            min_notice_hours=self.min_notice_hours,
            max_advance_days=self.max_advance_days,
            default_buffer_minutes=self.default_buffer_minutes,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path = Path("records.json")
    timezone: str = "Europe/Paris"
    log_level: str = "WARNING"
    defaults: BookingDefaults = Field(default_factory=BookingDefaults)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``data_file`` paths are resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config

    def resolve_data_file(self, override: Optional[Path] = None) -> Path:
        return override or self.data_file


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
