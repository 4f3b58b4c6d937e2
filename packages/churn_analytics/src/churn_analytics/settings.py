"""Pydantic configuration for churn_analytics."""

from __future__ import annotations

from pathlib import Path

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from churn_analytics.exceptions import ConfigError
from churn_analytics.models import FilterCriteria

DEFAULT_CONFIG_PATH = Path("config.yaml")


class WhatIfConfig(BaseModel):
    """Contract-migration scenario inputs."""

    pct_to_one_year: float = 15.0
    pct_to_two_year: float = 10.0
    cost_per_conversion: float = Field(default=35.0, ge=0)
    # Months of retained revenue credited per saved customer
    horizon_months: int = Field(default=6, ge=1)


class OutputConfig(BaseModel):
    """Output format toggles."""

    excel: bool = True


class Settings(BaseModel):
    """Application configuration -- immutable after creation."""

    model_config = {"frozen": True, "extra": "forbid"}

    data_file: Path | None = None
    output_dir: Path = Path("output/")
    demo_rows: int = Field(default=1200, ge=1)
    demo_seed: int = 71313
    filters: FilterCriteria = FilterCriteria()
    risk_cut: int = Field(default=65, ge=0, le=100)
    risk_top_n: int = Field(default=80, ge=1)
    driver_min_segment: int = Field(default=40, ge=0)
    driver_top_n: int = Field(default=5, ge=1)
    what_if: WhatIfConfig = WhatIfConfig()
    outputs: OutputConfig = OutputConfig()

    @field_validator("data_file", mode="before")
    @classmethod
    def expand_and_validate_data_file(cls, v: str | Path | None) -> Path | None:
        if v is None:
            return None
        p = Path(v).expanduser().resolve()
        if not p.exists():
            raise ValueError(f"Data file not found: {p}")
        if p.suffix.lower() not in (".csv", ".xlsx", ".xls"):
            raise ValueError(f"Unsupported file type: {p.suffix}")
        return p

    @field_validator("output_dir", mode="before")
    @classmethod
    def expand_output_dir(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()

    @property
    def source_name(self) -> str:
        """Display name of the data source."""
        return self.data_file.name if self.data_file else f"demo ({self.demo_rows} rows)"

    @classmethod
    def from_yaml(cls, config_path: Path = DEFAULT_CONFIG_PATH, **cli_overrides) -> Settings:
        """Load from YAML, merge CLI overrides (highest priority)."""
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.debug("No config file at {path}; using defaults", path=config_path)
            data = {}
        data.update({k: v for k, v in cli_overrides.items() if v is not None})
        try:
            return cls(**data)
        except Exception as e:
            raise ConfigError(f"Configuration error: {e}") from e

    @classmethod
    def from_args(cls, **kwargs) -> Settings:
        """Create settings directly from arguments (no YAML needed)."""
        try:
            return cls(**kwargs)
        except Exception as e:
            raise ConfigError(f"Configuration error: {e}") from e
