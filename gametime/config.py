"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class GridConfig(BaseModel):
    """Visible hour range of rendered grids."""
    start_hour: int = 0
    end_hour: int = 24

    @field_validator("start_hour")
    @classmethod
    def validate_start_hour(cls, v: int) -> int:
        """Validate start hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"start_hour must be between 0 and 23, got {v}")
        return v

    @field_validator("end_hour")
    @classmethod
    def validate_end_hour(cls, v: int) -> int:
        """Validate end hour is between 1 and 24."""
        if not 1 <= v <= 24:
            raise ValueError(f"end_hour must be between 1 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "GridConfig":
        """Ensure the visible window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def hour_range(self) -> Tuple[int, int]:
        return self.start_hour, self.end_hour


class SuggestionConfig(BaseModel):
    """Tuning for poll time suggestions."""
    days_ahead: int = 14
    top_n: int = 21
    limit: int = 20
    evening_hours: List[int] = Field(default_factory=lambda: [18, 19, 20, 21])

    @field_validator("days_ahead", "top_n", "limit")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("suggestion settings must be greater than zero")
        return value

    @field_validator("evening_hours")
    @classmethod
    def validate_evening_hours(cls, value: List[int]) -> List[int]:
        """Ensure hours are valid and sorted without duplicates."""
        invalid = [hour for hour in value if hour not in range(24)]
        if invalid:
            raise ValueError(f"evening_hours must be between 0 and 23, got {invalid}")
        return sorted(set(value))


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:3000/api"
    api_token: Optional[str] = None
    timezone: str = "UTC"
    log_level: str = "WARNING"
    grid: GridConfig = Field(default_factory=GridConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the display timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

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

    @classmethod
    def load_or_default(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """Load the config file when present, otherwise use defaults."""
        path = config_path or get_default_config_path()
        if config_path is None and not path.exists():
            return cls()
        return cls.load_from_yaml(path)


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
