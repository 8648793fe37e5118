"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local

Playback timing (`base_interval_ms`, `default_speed`) and the limits applied to
user-supplied input strings live here so the CLI and the timeline controller
agree on one source of truth.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    base_interval_ms : float
        Auto-play period at 1x speed, in milliseconds.
    default_speed : float
        Speed multiplier a fresh timeline starts with.
    max_input_length : int
        Longest input string accepted by `validate_input`.
    random_min_length, random_max_length : int
        Length bounds for `random_input`.
    """

    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    base_interval_ms: float = Field(default=1000.0, gt=0, alias="WINDOWTRACE_BASE_INTERVAL_MS")
    default_speed: float = Field(default=1.0, gt=0, alias="WINDOWTRACE_DEFAULT_SPEED")

    max_input_length: int = Field(default=50, ge=1, alias="WINDOWTRACE_MAX_INPUT_LENGTH")
    random_min_length: int = Field(default=3, ge=1, alias="WINDOWTRACE_RANDOM_MIN_LENGTH")
    random_max_length: int = Field(default=50, ge=1, alias="WINDOWTRACE_RANDOM_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_random_bounds(self) -> Settings:
        """Random lengths must form a non-empty range."""
        if self.random_min_length > self.random_max_length:
            raise ValueError("random_min_length must be <= random_max_length")
        return self

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    return Settings()


# Ready-to-use instance (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "windowtrace") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
