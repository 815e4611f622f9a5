"""Application configuration from environment variables."""

from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LIFTLOG_",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "liftlog"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Local database (single device, single writer)
    database_path: Path = Path("liftlog.db")
    create_tables: bool = True  # use Alembic instead when False

    # Workout session
    default_rest_seconds: int = 120

    # Storage retries (the session machine itself never retries)
    storage_retry_attempts: int = 3
    storage_retry_delay_seconds: float = 0.2

    # Analytics
    default_range_days: int = 30
    timezone: str = "UTC"  # IANA name; calendar days for consistency and volume

    # Exercise catalog
    catalog_path: Path = PACKAGE_DIR / "data" / "exercises.json"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def database_url(self) -> str:
        """Synchronous URL for Alembic and tooling."""
        return f"sqlite:///{self.database_path}"

    @property
    def async_database_url(self) -> str:
        """Async URL for the app (aiosqlite driver)."""
        return f"sqlite+aiosqlite:///{self.database_path}"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
