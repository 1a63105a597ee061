import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is only meant for local development. Set DATABASE_URL to a
    PostgreSQL connection string for shared deployments.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "calendar.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    calendar_timezone: str = Field(
        default="UTC",
        validation_alias="CALENDAR_TIMEZONE",
        description="IANA timezone used to decide what 'today' is for the calendar and the planner",
    )
    planner_horizon_cutoff_hour: int = Field(
        default=6,
        validation_alias="PLANNER_HORIZON_CUTOFF_HOUR",
        description="Plans created before this local hour start today, otherwise tomorrow",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

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

    @field_validator("calendar_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"CALENDAR_TIMEZONE is not a valid IANA timezone: {value!r}") from e
        return value

    @field_validator("planner_horizon_cutoff_hour")
    @classmethod
    def validate_cutoff_hour(cls, value: int) -> int:
        """Cutoff hour must be 0..24 (0 always starts tomorrow, 24 always starts today)."""
        if not 0 <= value <= 24:
            raise ValueError(f"PLANNER_HORIZON_CUTOFF_HOUR must be between 0 and 24, got {value}")
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.calendar_timezone)


settings = Settings()
