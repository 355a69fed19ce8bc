"""
Centralized configuration with environment variable overrides.

Studio-wide rental policy (cleaning buffer, default stock per size,
calendar horizon) lives here. Engine callers read defaults from
``settings`` instead of hardcoding them at each call site.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from outfit_rental.logging_context import STUDIO_LOG_FORMAT, studio_log_handler

load_dotenv()

logger = logging.getLogger(__name__)

MAX_CALENDAR_MONTHS = 24


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class StudioConfig:
    """Studio identity used in logs and demo output."""

    name: str = os.getenv("STUDIO_NAME", "Rang Rentals Studio")
    default_studio_id: str = os.getenv("DEFAULT_STUDIO_ID", "studio-demo")


@dataclass(frozen=True)
class RentalPolicyConfig:
    """Availability policy applied uniformly to existing bookings."""

    buffer_days: int = _safe_int("RENTAL_BUFFER_DAYS", "0")
    default_size_quantity: int = _safe_int("DEFAULT_SIZE_QUANTITY", "1")
    calendar_months: int = _safe_int("CALENDAR_MONTHS", "6")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    studio: StudioConfig = field(default_factory=StudioConfig)
    rental: RentalPolicyConfig = field(default_factory=RentalPolicyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "outfit-rental")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.rental.buffer_days < 0:
        raise ValueError(
            f"RENTAL_BUFFER_DAYS must be >= 0, got {config.rental.buffer_days}"
        )
    if config.rental.default_size_quantity < 1:
        raise ValueError(
            "DEFAULT_SIZE_QUANTITY must be >= 1, "
            f"got {config.rental.default_size_quantity}"
        )
    if not 1 <= config.rental.calendar_months <= MAX_CALENDAR_MONTHS:
        raise ValueError(
            f"CALENDAR_MONTHS must be between 1 and {MAX_CALENDAR_MONTHS}, "
            f"got {config.rental.calendar_months}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[studio_log_handler(STUDIO_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")],
    )
    logger.info("Configuration loaded for '%s'", config.studio.name)
    return config


# Singleton instance
settings = load_config()
