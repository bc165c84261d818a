import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLED_DEFAULT_PLAN = Path(__file__).parent.parent / "plans" / "data" / "default_plan.json"


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is fine for a single-user deployment. Set DATABASE_URL to point at
    PostgreSQL (or another SQLAlchemy URL) to use a different store.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        return db_url

    db_path = Path(__file__).parent.parent.parent / "sweatsync.db"
    return f"sqlite:///{db_path.resolve()}"


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    auth_secret_key: str = Field(default="change-me-in-production", validation_alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field(default="HS256", validation_alias="AUTH_ALGORITHM")
    auth_token_expire_hours: int = Field(default=24, validation_alias="AUTH_TOKEN_EXPIRE_HOURS")
    default_plan_path: Path = Field(default=BUNDLED_DEFAULT_PLAN, validation_alias="DEFAULT_PLAN_PATH")
    timezone: str = Field(
        default="UTC",
        validation_alias="TIMEZONE",
        description="IANA zone used to decide which weekday 'today' is",
    )
    history_default_limit: int = Field(default=10, validation_alias="HISTORY_DEFAULT_LIMIT")
    history_max_limit: int = Field(default=100, validation_alias="HISTORY_MAX_LIMIT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")
    cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")  # Comma-separated list

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
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Validate that the timezone is a known IANA zone name."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown TIMEZONE '{value}'. Defaulting to UTC.")
            return "UTC"
        return value

    @field_validator("auth_secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        if value == "change-me-in-production":
            logger.warning("AUTH_SECRET_KEY is not set. Using the development default; tokens are NOT secure.")
        return value

    @field_validator("history_default_limit", "history_max_limit")
    @classmethod
    def validate_positive_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("history limits must be >= 1")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


settings = Settings()
