"""Application configuration settings."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

# Heartbeats go out a little before the client-side read deadline expires.
PING_PERIOD_RATIO = 0.9


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./reelhub.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        default="change-me",
        description="Secret key used to verify websocket JWT tokens",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    allowed_origins: list[str] = Field(
        default_factory=list,
        description="Origins accepted by the websocket endpoint; empty allows any",
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone used for notification timestamps",
    )
    log_level: str = Field(default="INFO", description="Root log level")

    ws_queue_size: int = Field(
        default=256, description="Outbound messages buffered per connection", gt=0
    )
    ws_write_timeout_seconds: float = Field(
        default=10.0, description="Deadline for a single websocket write", gt=0
    )
    ws_pong_wait_seconds: float = Field(
        default=60.0,
        description="Client keepalive window; heartbeats are sent at 90% of it",
        gt=0,
    )
    persist_queue_size: int = Field(
        default=1024, description="Offline notifications waiting to be stored", gt=0
    )
    delete_queue_size: int = Field(
        default=1024, description="Delivered notification ids waiting for removal", gt=0
    )
    purge_interval_seconds: float = Field(
        default=3600.0, description="Interval between notification purges", gt=0
    )
    notification_retention_days: int = Field(
        default=30, description="Undelivered notifications older than this are purged", gt=0
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level

    @model_validator(mode="after")
    def _validate_timeouts(self) -> "Settings":
        if self.ws_write_timeout_seconds > self.ws_pong_wait_seconds:
            raise ValueError(
                "WS_WRITE_TIMEOUT_SECONDS must not exceed WS_PONG_WAIT_SECONDS"
            )
        return self

    @property
    def ws_ping_period_seconds(self) -> float:
        return self.ws_pong_wait_seconds * PING_PERIOD_RATIO


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["PING_PERIOD_RATIO", "Settings", "get_settings", "reset_settings_cache"]
