from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./moodlog.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = "*"

    # IANA zone that defines the user's calendar day.
    LOCAL_TIMEZONE: str = "UTC"

    # Weekday (Monday=0) on which the weekly review trigger fires.
    REVIEW_WEEKDAY: int = 0

    # Alternate catalog JSON; the packaged catalog.json is used when unset.
    CATALOG_PATH: Optional[str] = None

    REVIEW_READY_ATTEMPTS: int = 3
    REVIEW_READY_BACKOFF_SECONDS: float = 2.0
    REVIEW_READY_TIMEOUT_SECONDS: float = 10.0

    PATTERN_MIN_ENTRIES: int = 10

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
