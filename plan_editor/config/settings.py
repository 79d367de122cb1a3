import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from plan_editor.dates.constants import DEFAULT_AMBIGUITY_FUTURE_WINDOW_DAYS, DEFAULT_AMBIGUITY_PAST_WINDOW_DAYS
from plan_editor.plans.constants import DEFAULT_MAX_PATCHES, DEFAULT_PROPOSAL_TTL_MINUTES


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is for local development only. Set DATABASE_URL to a PostgreSQL
    connection string anywhere the schedule must survive a restart.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "plan_editor.db"
    db_url = f"sqlite:///{db_path.resolve()}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    plan_timezone: str = Field(
        default="Europe/Paris",
        validation_alias="PLAN_TIMEZONE",
        description="IANA timezone used to compute the reference 'today'",
    )
    max_patches_per_proposal: int = Field(
        default=DEFAULT_MAX_PATCHES,
        validation_alias="MAX_PATCHES_PER_PROPOSAL",
        description="Upper bound on how many days one proposal may change",
    )
    proposal_ttl_minutes: int = Field(
        default=DEFAULT_PROPOSAL_TTL_MINUTES,
        validation_alias="PROPOSAL_TTL_MINUTES",
        description="How long a preview stays committable",
    )
    ambiguity_past_window_days: int = Field(
        default=DEFAULT_AMBIGUITY_PAST_WINDOW_DAYS,
        validation_alias="AMBIGUITY_PAST_WINDOW_DAYS",
        description="A bare weekday is ambiguous when its past occurrence is at most this many days ago",
    )
    ambiguity_future_window_days: int = Field(
        default=DEFAULT_AMBIGUITY_FUTURE_WINDOW_DAYS,
        validation_alias="AMBIGUITY_FUTURE_WINDOW_DAYS",
        description="...and its future occurrence is at most this many days ahead",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("plan_timezone")
    @classmethod
    def validate_plan_timezone(cls, value: str) -> str:
        """Fall back to UTC when the configured zone is not a known IANA name."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown PLAN_TIMEZONE '{value}'. Defaulting to UTC.")
            return "UTC"
        return value

    @field_validator("max_patches_per_proposal")
    @classmethod
    def validate_max_patches(cls, value: int) -> int:
        if value < 1:
            logger.warning(f"MAX_PATCHES_PER_PROPOSAL must be >= 1, got {value}. Defaulting to {DEFAULT_MAX_PATCHES}.")
            return DEFAULT_MAX_PATCHES
        return value

    @field_validator("proposal_ttl_minutes")
    @classmethod
    def validate_proposal_ttl(cls, value: int) -> int:
        """Clamp proposal TTL into 1..120 minutes."""
        if value < 1 or value > 120:
            clamped = min(max(value, 1), 120)
            logger.warning(f"PROPOSAL_TTL_MINUTES must be within 1..120, got {value}. Using {clamped}.")
            return clamped
        return value

    @field_validator("ambiguity_past_window_days", "ambiguity_future_window_days")
    @classmethod
    def validate_ambiguity_window(cls, value: int) -> int:
        if value < 0:
            logger.warning(f"Ambiguity window must be >= 0, got {value}. Using 0.")
            return 0
        return value


settings = Settings()
