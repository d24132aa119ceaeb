"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for formatting, status and logging."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    locale: Literal["en", "de"] = Field(default="en", alias="KPI_LOCALE")
    timezone: str = Field(default="Europe/Berlin", alias="KPI_TIMEZONE")
    warning_days: int = Field(default=3, alias="KPI_WARNING_DAYS", ge=0)
    trend_window: int = Field(default=3, alias="KPI_TREND_WINDOW", ge=2)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance for the current process."""

    return Settings()
