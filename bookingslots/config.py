"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import MalformedInput
from .domain.models import parse_time_of_day


class DefaultsConfig(BaseModel):
    """Default working time offered when adding to the roster."""
    working_start: str = "09:00"
    working_end: str = "17:00"

    @field_validator("working_start", "working_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Ensure defaults are "HH:MM" times."""
        try:
            parse_time_of_day(value)
        except MalformedInput:
            raise ValueError(f"Time must be in HH:MM format, got {value!r}") from None
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the default working time starts before it ends."""
        if self.get_start_time() >= self.get_end_time():
            raise ValueError("working_end must be later than working_start")
        return self

    def get_start_time(self) -> time:
        return parse_time_of_day(self.working_start)

    def get_end_time(self) -> time:
        return parse_time_of_day(self.working_end)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Australia/Melbourne"
    week_start: int = 0  # 0=Monday, 6=Sunday
    history_months: int = 6
    data_file: Optional[Path] = None
    log_level: str = "WARNING"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @field_validator("week_start")
    @classmethod
    def validate_week_start(cls, value: int) -> int:
        """Ensure the week start is a weekday number."""
        if value not in range(7):
            raise ValueError(f"week_start must be between 0 and 6, got {value}")
        return value

    @field_validator("history_months")
    @classmethod
    def validate_history_months(cls, value: int) -> int:
        if value < 1:
            raise ValueError("history_months must be at least 1")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log_level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's directory.

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
        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
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
