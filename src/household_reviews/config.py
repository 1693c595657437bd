"""Settings for the household review tracker, read with pydantic-settings.

Every field can be set through an HRV_-prefixed environment variable or a
.env file in the working directory.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _default_data_file() -> Path:
    return Path.home() / ".household_reviews" / "households.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with HRV_) or .env file.

    Examples:
        HRV_DATA_FILE=/srv/reviews/households.json
        HRV_LOG_LEVEL=DEBUG
        HRV_AUTOSAVE_QUIET_SECONDS=2.5
    """

    model_config = SettingsConfigDict(
        env_prefix="HRV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Household Review Tracker"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False, description="Enable debug mode")

    # Storage
    data_file: Path = Field(
        default_factory=_default_data_file,
        description="Workspace document used when no explicit path is given",
    )
    backup_dir: Path | None = Field(
        default=None,
        description="Directory for timestamped backups. Defaults to the data file's directory.",
    )
    default_backup_count: int = Field(default=10, ge=0, le=100)
    default_theme: Literal["light", "dark"] = "light"

    # Autosave
    autosave_quiet_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Quiet period after the last change before an autosave runs",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    @field_validator("data_file", "backup_dir", mode="after")
    @classmethod
    def expand_user_paths(cls, v: Path | None) -> Path | None:
        """Allow `~` in HRV_DATA_FILE and HRV_BACKUP_DIR."""
        return v.expanduser() if v is not None else None

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process. Call get_settings.cache_clear() to reload."""
    return Settings()
