"""
Central configuration management using Pydantic settings.

Provides type-safe configuration with validation, environment variable
support (``QI_`` prefix, ``__`` for nested sections), and an optional YAML
overlay file named by ``QI_CONFIG_FILE``.

Example:
    QI_NUMERIC__NUM_TYPE=double
    QI_SERIES__MAXIMUM_BAR_COUNT=500
    QI_LOGGING__LEVEL=DEBUG
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quant_indicators.core.exceptions import ConfigParseError
from quant_indicators.core.num import DEFAULT_DECIMAL_PRECISION, NumFactory, create_num_factory

CONFIG_FILE_ENV = "QI_CONFIG_FILE"


class NumericSettings(BaseModel):
    """Default numeric representation for new series."""

    num_type: Literal["decimal", "double"] = Field(
        default="decimal", description="Numeric representation (decimal or double)"
    )
    precision: int = Field(
        default=DEFAULT_DECIMAL_PRECISION, gt=0, description="Significant digits for decimal values"
    )

    @field_validator("num_type", mode="before")
    @classmethod
    def normalize_num_type(cls, v: Any) -> Any:
        """Accept any casing for the representation name."""
        return v.strip().lower() if isinstance(v, str) else v


class SeriesSettings(BaseModel):
    """Bar series defaults."""

    maximum_bar_count: int | None = Field(
        default=None, gt=0, description="Bar retention bound for built series (None = unbounded)"
    )
    default_time_period_seconds: float = Field(
        default=86400.0, gt=0, description="Bar duration used when none is given"
    )


class IndicatorSettings(BaseModel):
    """Indicator evaluation settings."""

    recursion_fill_threshold: int = Field(
        default=100,
        gt=0,
        description="Gap above which recursive indicators pre-fill their cache iteratively",
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format (json or text)")
    file_path: Path | None = Field(default=None, description="Log file path")


class Settings(BaseSettings):
    """Main library settings."""

    model_config = SettingsConfigDict(
        env_prefix="QI_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    numeric: NumericSettings = Field(default_factory=NumericSettings)
    series: SeriesSettings = Field(default_factory=SeriesSettings)
    indicators: IndicatorSettings = Field(default_factory=IndicatorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def num_factory(self) -> NumFactory:
        """Create the configured default numeric factory."""
        return create_num_factory(self.numeric.num_type, self.numeric.precision)

    @classmethod
    def load_yaml_config(cls, config_path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file.

        Returns an empty dict when the file does not exist.

        Raises:
            ConfigParseError: If the file is not valid YAML or not a mapping.
        """
        if not config_path.exists():
            return {}
        with open(config_path, "r") as f:
            try:
                config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                raise ConfigParseError(
                    f"Invalid YAML in {config_path}: {e}",
                    config_file=str(config_path),
                    line_number=mark.line + 1 if mark is not None else None,
                ) from e
        if not isinstance(config, dict):
            raise ConfigParseError(
                f"Top level of {config_path} must be a mapping",
                config_file=str(config_path),
            )
        return config

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> Settings:
        """Build settings with a YAML overlay on top of env and defaults."""
        return cls(**cls.load_yaml_config(Path(config_path)))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Loads configurations in order:
    1. Defaults
    2. Environment variables and .env file
    3. YAML overlay named by ``QI_CONFIG_FILE``, if set
    """
    config_file = os.environ.get(CONFIG_FILE_ENV)
    if config_file:
        return Settings.from_yaml(config_file)
    return Settings()
