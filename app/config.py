from datetime import time
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_clock_time(value: str) -> tuple[int, int]:
    """Parse an ``HH:MM`` string into ``(hour, minute)``."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(len(part) == 2 and part.isdigit() for part in parts):
        raise ValueError("Time must use the HH:MM format, e.g. 22:20")
    hour, minute = int(parts[0]), int(parts[1])
    if hour > 23 or minute > 59:
        raise ValueError("Time must use the HH:MM format, e.g. 22:20")
    return hour, minute


class Settings(BaseSettings):
    """Centralised application settings, sourced from environment variables or .env."""

    app_name: str = Field(default="MoneyBuddy", alias="APP_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    database_url: str = Field(alias="DATABASE_URL")
    direct_database_url: Optional[str] = Field(
        default=None,
        alias="DIRECT_DATABASE_URL",
        description="Optional direct Postgres connection string used for running migrations.",
    )
    auto_run_migrations: bool = Field(default=False, alias="AUTO_RUN_MIGRATIONS")
    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_webhook_secret: Optional[str] = Field(
        default=None,
        alias="TELEGRAM_WEBHOOK_SECRET",
        description="Path secret for the webhook endpoint; the bot token is used when unset.",
    )
    use_telegram_webhook: bool = Field(default=True, alias="USE_TELEGRAM_WEBHOOK")
    backend_base_url: Optional[AnyHttpUrl] = Field(
        default=None,
        alias="BACKEND_BASE_URL",
        description="The public URL where FastAPI is reachable (webhook and keep-alive target).",
    )
    daily_reminder_time: str = Field(default="22:00", alias="DAILY_REMINDER_TIME")
    reminder_timezone: str = Field(default="Asia/Ho_Chi_Minh", alias="REMINDER_TIMEZONE")
    keep_alive_sleep_start: int = Field(default=23, alias="KEEP_ALIVE_SLEEP_START", ge=0, le=23)
    keep_alive_sleep_end: int = Field(default=6, alias="KEEP_ALIVE_SLEEP_END", ge=0, le=23)
    keep_alive_interval_minutes: int = Field(
        default=14, alias="KEEP_ALIVE_INTERVAL_MINUTES", ge=1
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("daily_reminder_time")
    @classmethod
    def _validate_reminder_time(cls, value: str) -> str:
        parse_clock_time(value)
        return value.strip()

    @field_validator("reminder_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.reminder_timezone)

    @property
    def report_time(self) -> time:
        hour, minute = parse_clock_time(self.daily_reminder_time)
        return time(hour=hour, minute=minute, tzinfo=self.timezone)

    @property
    def is_webhook_mode(self) -> bool:
        return self.use_telegram_webhook and self.backend_base_url is not None

    @property
    def webhook_secret(self) -> Optional[str]:
        return self.telegram_webhook_secret or self.telegram_bot_token

    @property
    def public_base_url(self) -> Optional[str]:
        if self.backend_base_url is None:
            return None
        return str(self.backend_base_url).rstrip("/")

    @property
    def keep_alive_url(self) -> Optional[str]:
        base_url = self.public_base_url
        return f"{base_url}/healthz" if base_url else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor so imports share a single settings instance."""
    return Settings()  # type: ignore[call-arg]
