"""Configuration management for ascetic_planner."""

import math

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Local persistence
    sqlite_db_path: str = Field(default="ascetic_planner.db", description="SQLite file mirroring the task collection")

    # Remote snapshot store (JSONBin-compatible)
    remote_base_url: str = Field(default="https://api.jsonbin.io/v3", description="Remote snapshot API base URL")
    remote_bin_id: str | None = Field(default=None, description="Shared snapshot identifier")
    remote_master_key: str | None = Field(default=None, description="Access credential for the snapshot store")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Discipline
    focus_edit_lock_seconds: int = Field(
        default=72 * 60 * 60,
        description="How long a focus task's title stays locked after each accepted edit (in seconds)",
    )
    default_app_title: str = Field(default="Дисциплина.", description="App title used when nothing is stored")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value

    @property
    def focus_edit_lock_ms(self) -> int:
        """Lock duration in epoch-millisecond units."""
        return self.focus_edit_lock_seconds * 1000


# Application Constants
class Constants:
    """Application-wide constants."""

    # Time units (milliseconds)
    MS_PER_SECOND: int = 1000
    MS_PER_MINUTE: int = 60 * 1000
    MS_PER_HOUR: int = 60 * 60 * 1000
    MS_PER_DAY: int = 24 * 60 * 60 * 1000

    # Section capacities (done is unbounded)
    SECTION_LIMITS: dict[str, float] = {
        "today": 3,
        "tomorrow": 3,
        "thisWeek": 10,
        "nextWeek": 10,
        "month": 20,
        "done": math.inf,
    }

    # Visual decay thresholds
    STALE_TODAY_MS: int = 24 * 60 * 60 * 1000  # 1 day in "today"
    STAGNATION_THRESHOLD_MS: int = 3 * 24 * 60 * 60 * 1000  # 3 days untouched

    # Weekly focus period
    WEEK_MS: int = 168 * 60 * 60 * 1000
    FOCUS_PERIOD_CHECK_SECONDS: int = 60

    # Trading gate
    TRADING_TAGS: tuple[str, ...] = ("#trading", "#трейдинг")
    TRADING_CHECKLIST: tuple[str, ...] = (
        "1. Считать R (Риск)",
        "2. Правило одного косяка",
        "3. Чек-лист вместо чуйки",
        "4. Работа-инвестор",
        "5. Полюбить скуку",
    )

    # Remote API
    API_TIMEOUT_SECONDS: int = 30

    # Local app state keys
    APP_TITLE_KEY: str = "app_title"
    FOCUS_START_KEY: str = "focusStartTime"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
