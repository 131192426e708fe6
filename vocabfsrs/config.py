"""
Centralized configuration management for vocabfsrs.
"""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_ENABLE_FUZZ,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_REQUEST_RETENTION,
)
from .models import SchedulerParams
from .params import load_params_file


class Settings(BaseSettings):
    """
    Defines application settings, loaded from environment variables or .env files.

    Every field can be overridden with a VOCABFSRS_-prefixed variable, e.g.
    VOCABFSRS_REQUEST_RETENTION=0.85.
    """
    model_config = SettingsConfigDict(
        env_prefix="VOCABFSRS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Scheduling defaults ---
    request_retention: float = Field(default=DEFAULT_REQUEST_RETENTION, gt=0, lt=1)
    maximum_interval: int = Field(default=DEFAULT_MAXIMUM_INTERVAL, ge=1)
    enable_fuzz: bool = DEFAULT_ENABLE_FUZZ

    # A YAML/JSON parameter document. When set it takes precedence over the
    # scalar settings above.
    params_file: Optional[Path] = None

    # --- Logging ---
    log_level: str = "WARNING"

    def scheduler_params(self) -> SchedulerParams:
        """Build the parameter set these settings describe."""
        if self.params_file is not None:
            return load_params_file(self.params_file)
        return SchedulerParams(
            request_retention=self.request_retention,
            maximum_interval=self.maximum_interval,
            enable_fuzz=self.enable_fuzz,
        )


def get_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings()
