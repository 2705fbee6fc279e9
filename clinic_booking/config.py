"""
Centralized configuration with environment variable overrides.

Operating hours, the booking grid, the clinic-wide daily cap and the data
directory all live here. Nothing is hardcoded in model or store logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, time

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_time(env_var: str, default: str) -> time:
    """Parse an HH:MM time from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return datetime.strptime(raw.strip(), "%H:%M").time()
    except (ValueError, TypeError, AttributeError):
        raise ValueError(
            f"Invalid HH:MM time for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class ClinicConfig:
    """Operating hours and booking grid."""

    name: str = os.getenv("CLINIC_NAME", "Sehha Clinic")
    opening_time: time = _safe_time("CLINIC_OPENING_TIME", "07:00")
    closing_time: time = _safe_time("CLINIC_CLOSING_TIME", "20:30")
    slot_duration_minutes: int = _safe_int("SLOT_DURATION_MINUTES", "30")
    max_slots_per_day: int = _safe_int("MAX_SLOTS_PER_DAY", "28")

    @property
    def grid_length(self) -> int:
        """Number of start times between opening and closing, inclusive."""
        span = _minutes(self.closing_time) - _minutes(self.opening_time)
        return span // self.slot_duration_minutes + 1


@dataclass(frozen=True)
class StorageConfig:
    """Where the three collections are persisted."""

    data_dir: str = os.getenv("CLINIC_DATA_DIR", "data")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    clinic: ClinicConfig = field(default_factory=ClinicConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    clinic = config.clinic
    if clinic.opening_time >= clinic.closing_time:
        raise ValueError(
            "CLINIC_OPENING_TIME must be before CLINIC_CLOSING_TIME, "
            f"got {clinic.opening_time:%H:%M} and {clinic.closing_time:%H:%M}"
        )
    if clinic.slot_duration_minutes < 1:
        raise ValueError(
            f"SLOT_DURATION_MINUTES must be >= 1, got {clinic.slot_duration_minutes}"
        )
    span = _minutes(clinic.closing_time) - _minutes(clinic.opening_time)
    if span % clinic.slot_duration_minutes != 0:
        raise ValueError(
            "SLOT_DURATION_MINUTES must evenly divide the opening hours, "
            f"got {clinic.slot_duration_minutes} for a {span} minute span"
        )
    if not 1 <= clinic.max_slots_per_day <= clinic.grid_length:
        raise ValueError(
            f"MAX_SLOTS_PER_DAY must be between 1 and {clinic.grid_length}, "
            f"got {clinic.max_slots_per_day}"
        )
    if not config.storage.data_dir.strip():
        raise ValueError("CLINIC_DATA_DIR must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.clinic.name)
    return config


# Singleton instance
settings = load_config()
