"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import DAY_NAMES, DayHours, WeeklyHours

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


class DayHoursConfig(BaseModel):
    """Opening hours of one weekday."""
    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM or HH:MM:SS format."""
        if not _HHMM.match(value):
            raise ValueError(f"Time must be HH:MM, got {value!r}")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "DayHoursConfig":
        """Ensure the day opens before it closes."""
        if self.open > self.close:
            raise ValueError(f"open ({self.open}) must not be after close ({self.close})")
        return self

    def to_domain(self) -> DayHours:
        return DayHours(open=self.open, close=self.close)


class BackendConfig(BaseModel):
    """Hosted backend (REST) connection settings."""
    base_url: str
    api_key: str
    timeout_seconds: float = 30

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    instance_id: str = "default"
    timezone: str = "Europe/Warsaw"
    slot_step_minutes: int = 15
    working_hours: Optional[Dict[str, Optional[DayHoursConfig]]] = None
    services: Dict[str, str] = Field(default_factory=dict)
    stations: Dict[str, str] = Field(default_factory=dict)
    employees: Dict[str, str] = Field(default_factory=dict)
    backend: Optional[BackendConfig] = None
    data_file: Optional[Path] = None

    @field_validator("slot_step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        """Slot generation requires a positive step."""
        if value <= 0:
            raise ValueError("slot_step_minutes must be greater than zero")
        return value

    @field_validator("working_hours")
    @classmethod
    def validate_day_names(
        cls, value: Optional[Dict[str, Optional[DayHoursConfig]]]
    ) -> Optional[Dict[str, Optional[DayHoursConfig]]]:
        """Only lowercase English day names are accepted as keys."""
        if value is None:
            return value
        unknown = sorted(day for day in value if day not in DAY_NAMES)
        if unknown:
            raise ValueError(f"Unknown day name(s) in working_hours: {', '.join(unknown)}")
        return value

    def weekly_hours(self) -> Optional[WeeklyHours]:
        """Configured working hours as the domain table."""
        if self.working_hours is None:
            return None
        return {
            day: (hours.to_domain() if hours is not None else None)
            for day, hours in self.working_hours.items()
        }

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of washbook/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
