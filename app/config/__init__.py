
"""
Application Settings
Load from environment variables
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Tuple


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Database
    # ======================
    DATABASE_URL: str = "sqlite+aiosqlite:///./finance_tracker.db"
    AUTO_CREATE_TABLES: bool = True
    SEED_DEFAULT_CATEGORIES: bool = True

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # ======================
    # Auth
    # ======================
    AUTH_TOKEN_TTL_HOURS: int = 24 * 7

    # ======================
    # Scheduler
    # ======================
    SCHEDULER_ENABLED: bool = True
    RECURRING_SWEEP_TIME: str = "00:00"

    # ======================
    # Timezone
    # ======================
    TIMEZONE: str = "UTC"

    @field_validator("RECURRING_SWEEP_TIME")
    @classmethod
    def check_sweep_time(cls, value: str) -> str:
        hour, _, minute = value.partition(":")
        if not (hour.isdigit() and minute.isdigit() and 0 <= int(hour) < 24 and 0 <= int(minute) < 60):
            raise ValueError("RECURRING_SWEEP_TIME must be HH:MM")
        return value

    @property
    def sweep_hour_minute(self) -> Tuple[int, int]:
        hour, minute = self.RECURRING_SWEEP_TIME.split(":")
        return int(hour), int(minute)

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
