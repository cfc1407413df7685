"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Care thresholds live here, not in the computations that use them
"""

import os
from datetime import datetime
from functools import lru_cache
from typing import Literal, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()


class CareConfig(BaseModel):
    """Thresholds used by the derived-state classifiers."""

    near_expiry_days: int = Field(
        default=30, ge=0, description="Days before expiry a vaccination counts as near expiry"
    )
    due_soon_days: int = Field(
        default=14, ge=0, description="Days before the next dose a vaccination counts as due soon"
    )
    upcoming_appointment_days: int = Field(
        default=7, ge=0, description="Window for the upcoming-appointment flag"
    )
    meal_soon_minutes: int = Field(
        default=30, ge=0, description="Minutes before a feeding it counts as soon"
    )

    # Normal body temperature range, calibrated for a dog and applied to every species
    normal_temperature_min: float = Field(default=38.0, description="Lowest normal temperature")
    normal_temperature_max: float = Field(default=39.2, description="Highest normal temperature")

    @model_validator(mode="after")
    def temperature_range_ordered(self) -> "CareConfig":
        if self.normal_temperature_min > self.normal_temperature_max:
            raise ValueError("normal_temperature_min must not exceed normal_temperature_max")
        return self


class OverviewConfig(BaseModel):
    """Limits for the overview queries."""

    upcoming_appointment_limit: int = Field(
        default=5, gt=0, description="Maximum number of upcoming appointments listed"
    )
    weight_history_limit: int = Field(
        default=10, gt=0, description="Maximum number of weight history points"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    timezone: str = Field(default="UTC", description="Time zone used for calendar-day checks")

    # Component configs
    care: CareConfig = Field(default_factory=CareConfig)
    overview: OverviewConfig = Field(default_factory=OverviewConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    care_config = CareConfig(
        near_expiry_days=int(os.getenv("NEAR_EXPIRY_DAYS", "30")),
        due_soon_days=int(os.getenv("DUE_SOON_DAYS", "14")),
        upcoming_appointment_days=int(os.getenv("UPCOMING_APPOINTMENT_DAYS", "7")),
        meal_soon_minutes=int(os.getenv("MEAL_SOON_MINUTES", "30")),
        normal_temperature_min=float(os.getenv("NORMAL_TEMPERATURE_MIN", "38.0")),
        normal_temperature_max=float(os.getenv("NORMAL_TEMPERATURE_MAX", "39.2")),
    )

    overview_config = OverviewConfig(
        upcoming_appointment_limit=int(os.getenv("UPCOMING_APPOINTMENT_LIMIT", "5")),
        weight_history_limit=int(os.getenv("WEIGHT_HISTORY_LIMIT", "10")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        timezone=os.getenv("PETCARE_TIMEZONE", "UTC"),
        care=care_config,
        overview=overview_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def current_time() -> datetime:
    """Current instant in the configured time zone."""
    return datetime.now(get_config().tzinfo)


# Configuration validation and helpers
def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")
        print(f"✅ Calendar time zone: {config.timezone}")
    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


# Development helpers
def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")
    print(f"Time Zone: {config.timezone}")

    print("\n💉 VACCINATION THRESHOLDS")
    print(f"Near Expiry: {config.care.near_expiry_days} days")
    print(f"Due Soon: {config.care.due_soon_days} days")

    print("\n🩺 HEALTH THRESHOLDS")
    print(
        f"Normal Temperature: {config.care.normal_temperature_min}"
        f"-{config.care.normal_temperature_max} °C"
    )

    print("\n📅 SCHEDULING")
    print(f"Upcoming Appointment Window: {config.care.upcoming_appointment_days} days")
    print(f"Meal Soon Window: {config.care.meal_soon_minutes} minutes")
    print(f"Upcoming Appointment Limit: {config.overview.upcoming_appointment_limit}")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()
