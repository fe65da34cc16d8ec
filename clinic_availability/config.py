"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import Literal

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import ScheduleConfig, TimeInterval, parse_clock


class DefaultSlotConfig(BaseModel):
    """Interval offered when a day or time slot is added in the editor."""
    start: str = "09:00"
    end: str = "17:00"

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Validate the HH:MM format."""
        parse_clock(value)
        return value.strip()

    @model_validator(mode="after")
    def validate_order(self) -> "DefaultSlotConfig":
        """Ensure the default slot opens before it closes."""
        if parse_clock(self.end) <= parse_clock(self.start):
            raise ValueError("default_slot.end must be later than default_slot.start")
        return self

    def get_start_time(self) -> time:
        return parse_clock(self.start)

    def get_end_time(self) -> time:
        return parse_clock(self.end)

    def to_interval(self) -> TimeInterval:
        return TimeInterval(start=self.get_start_time(), end=self.get_end_time())


class AppConfig(BaseModel):
    """Application configuration."""
    data_dir: Path = Path("schedules")
    timezone: str = "Europe/Madrid"
    buffer_minutes: int = 0
    max_range_days: int = 731
    locale: Literal["es", "en"] = "es"
    default_slot: DefaultSlotConfig = Field(default_factory=DefaultSlotConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the time zone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown time zone: '{value}'") from exc
        return value

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        """Buffer may be zero but never negative."""
        if value < 0:
            raise ValueError(f"buffer_minutes must not be negative, got {value}")
        return value

    @field_validator("max_range_days")
    @classmethod
    def validate_max_range(cls, value: int) -> int:
        """Ensure the resolution range bound is positive."""
        if value <= 0:
            raise ValueError("max_range_days must be greater than zero")
        return value

    def get_schedule_defaults(self) -> ScheduleConfig:
        """Schedule settings used for professionals without stored ones."""
        return ScheduleConfig(timezone=self.timezone, buffer_minutes=self.buffer_minutes)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``data_dir`` values are resolved against the config file.

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
        if not config.data_dir.is_absolute():
            config = config.model_copy(update={"data_dir": config_path.parent / config.data_dir})
        return config


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
