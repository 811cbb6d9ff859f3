"""
Centralized configuration with environment variable overrides.

Business, scheduling, account and integration settings are configurable
here. Nothing is hardcoded in repository or workflow logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from emerald_details.logging_context import attach_session_filter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(session_id)s]: %(message)s"

WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (true/false, 1/0, yes/no) from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


def _safe_int_list(env_var: str, default: str) -> tuple[int, ...]:
    """Parse a comma-separated list of integers from an env var."""
    raw = os.getenv(env_var, default)
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer list for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Emerald Details")
    support_email: str = os.getenv("SUPPORT_EMAIL", "support@emeralddetails.com")
    timezone: str = os.getenv("BUSINESS_TIMEZONE", "America/Chicago")
    week_starts_on: str = os.getenv("WEEK_STARTS_ON", "sunday").lower()


@dataclass(frozen=True)
class SchedulingConfig:
    """Daily slot layout and slot lifecycle switches."""

    slot_hours: tuple[int, ...] = _safe_int_list("SLOT_HOURS", "8,10,12,14,16")
    slot_length_hours: int = _safe_int("SLOT_LENGTH_HOURS", "2")
    skip_weekends: bool = _safe_bool("SKIP_WEEKENDS", "true")
    release_slot_on_cancel: bool = _safe_bool("RELEASE_SLOT_ON_CANCEL", "false")


@dataclass(frozen=True)
class AccountConfig:
    """Sign-up form rules."""

    min_password_length: int = _safe_int("MIN_PASSWORD_LENGTH", "6")


@dataclass(frozen=True)
class GeocodingConfig:
    """Forward/reverse geocoding and place search provider settings."""

    base_url: str = os.getenv(
        "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"
    ).rstrip("/")
    # Nominatim usage policy requires a User-Agent with contact info
    user_agent: str = os.getenv(
        "NOMINATIM_USER_AGENT", "EmeraldDetails/1.0 (support@emeralddetails.com)"
    )
    timeout_sec: float = _safe_float("GEOCODING_TIMEOUT", "8.0")
    search_radius_meters: int = _safe_int("SEARCH_RADIUS_METERS", "50000")
    result_limit: int = _safe_int("GEOCODING_RESULT_LIMIT", "6")


@dataclass(frozen=True)
class PaymentConfig:
    """Payment gateway selection."""

    gateway: str = os.getenv("PAYMENT_GATEWAY", "mock")
    currency: str = os.getenv("PAYMENT_CURRENCY", "usd")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    accounts: AccountConfig = field(default_factory=AccountConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    payments: PaymentConfig = field(default_factory=PaymentConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "emerald-details")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.business.week_starts_on not in WEEKDAY_NAMES:
        raise ValueError(
            f"WEEK_STARTS_ON must be a weekday name, got {config.business.week_starts_on!r}"
        )
    if not config.scheduling.slot_hours:
        raise ValueError("SLOT_HOURS must list at least one hour")
    for hour in config.scheduling.slot_hours:
        if not 0 <= hour <= 23:
            raise ValueError(f"SLOT_HOURS entries must be between 0 and 23, got {hour}")
    if not 1 <= config.scheduling.slot_length_hours <= 12:
        raise ValueError(
            "SLOT_LENGTH_HOURS must be between 1 and 12, "
            f"got {config.scheduling.slot_length_hours}"
        )
    if config.accounts.min_password_length < 1:
        raise ValueError(
            f"MIN_PASSWORD_LENGTH must be >= 1, got {config.accounts.min_password_length}"
        )
    if config.geocoding.timeout_sec <= 0:
        raise ValueError(
            f"GEOCODING_TIMEOUT must be > 0, got {config.geocoding.timeout_sec}"
        )
    if config.geocoding.search_radius_meters < 1:
        raise ValueError(
            "SEARCH_RADIUS_METERS must be >= 1, "
            f"got {config.geocoding.search_radius_meters}"
        )
    if not 1 <= config.geocoding.result_limit <= 50:
        raise ValueError(
            "GEOCODING_RESULT_LIMIT must be between 1 and 50, "
            f"got {config.geocoding.result_limit}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    attach_session_filter(logging.getLogger())
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
