from __future__ import annotations

"""Configuration utilities for superepoch.

This module defines a hierarchical configuration schema using Pydantic models.
The :class:`Settings` container groups the epoch window, statistics, index
alignment, ingestion and logging sections.  Instances can be populated from
environment variables (``SUPEREPOCH_WINDOW__HALF_WIDTH=2``) or from YAML/JSON
files with matching nested keys.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.index_align import OUT_OF_RANGE_POLICIES
from .core.statistics import QUANTILE_METHODS
from .types import BOUNDARY_POLICIES, EpochWindowConfig

# 8 years of roughly month-long (30 day) bins.
DEFAULT_BIN_COUNT = int(365.25 * 8 / 30)


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class WindowSettings(SectionModel):
    """Relative-time axis used by binned alignment."""

    half_width: float = Field(default=4.0, gt=0)
    bin_count: int = Field(default=DEFAULT_BIN_COUNT, gt=0)
    boundary: str = "closed"

    @field_validator("boundary")
    @classmethod
    def _check_boundary(cls, value: str) -> str:
        if value not in BOUNDARY_POLICIES:
            raise ValueError(f"boundary must be one of {', '.join(BOUNDARY_POLICIES)}")
        return value

    def to_config(self) -> EpochWindowConfig:
        return EpochWindowConfig(self.half_width, self.bin_count, self.boundary)


class StatisticsSettings(SectionModel):
    """Cross-event aggregation options."""

    quantile_method: str = "linear"

    @field_validator("quantile_method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        if value not in QUANTILE_METHODS:
            raise ValueError(f"unknown quantile method: {value}")
        return value


class IndexSettings(SectionModel):
    """Options for alignment by sample count.

    Either ``k`` (samples) or ``half_width`` (time units, converted with the
    series cadence) may be given; ``k`` wins when both are set.
    """

    k: int | None = Field(default=None, ge=0)
    half_width: float | None = Field(default=None, gt=0)
    on_out_of_range: str = "raise"
    cadence_rtol: float = Field(default=1e-3, gt=0)
    cadence_atol: float | None = Field(default=None, gt=0)

    @field_validator("on_out_of_range")
    @classmethod
    def _check_policy(cls, value: str) -> str:
        if value not in OUT_OF_RANGE_POLICIES:
            raise ValueError(
                f"on_out_of_range must be one of {', '.join(OUT_OF_RANGE_POLICIES)}"
            )
        return value


class IngestSettings(SectionModel):
    """Layout of delimited input files.

    The defaults match the SILSO daily sunspot number file
    (``year;month;day;fraction_of_year;ssn;...``) where ``-1`` marks a
    missing observation.
    """

    time_col: int = Field(default=3, ge=0)
    value_col: int = Field(default=4, ge=0)
    delimiter: str | None = ";"
    sentinel: float | None = -1.0
    event_shift: float = 0.0

    @model_validator(mode="after")
    def _distinct_columns(self) -> "IngestSettings":
        if self.time_col == self.value_col:
            raise ValueError("time_col and value_col must differ")
        return self


class LoggingSettings(SectionModel):
    """Logging verbosity for the command line tools."""

    level: str = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def _normalise_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.upper()
            if not isinstance(logging.getLevelName(value), int):
                raise ValueError(f"unknown logging level: {value}")
        return value


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    window: WindowSettings = Field(default_factory=WindowSettings)
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    ingest: IngestSettings = Field(default_factory=IngestSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="SUPEREPOCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from defaults and ``SUPEREPOCH_*`` variables."""

        return cls()


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)


__all__ = [
    "DEFAULT_BIN_COUNT",
    "WindowSettings",
    "StatisticsSettings",
    "IndexSettings",
    "IngestSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
]
