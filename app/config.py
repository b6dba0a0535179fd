"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when rendering timestamps inside notification messages",
    )
    log_level: str = Field(default="INFO", description="Root log level")

    kafka_enabled: bool = Field(
        default=True, description="Start the Kafka consumer with the application"
    )
    kafka_brokers: str = Field(
        default="localhost:9092",
        description="Comma separated list of Kafka bootstrap servers",
        min_length=1,
    )
    kafka_topic: str = Field(default="user-events", min_length=1)
    kafka_group_id: str = Field(default="notification-group", min_length=1)
    kafka_client_id: str = Field(default="notification-service", min_length=1)
    kafka_retry_backoff_seconds: float = Field(
        default=5.0,
        description="Fixed delay before reconnecting or retrying a failed event",
        gt=0,
    )

    notification_retention_days: int = Field(
        default=30,
        description="Number of days a notification is kept before it expires",
        gt=0,
    )
    notification_purge_interval_seconds: float = Field(
        default=300.0,
        description="Interval between two runs of the expired notification reaper",
        gt=0,
    )
    presence_shard_count: int = Field(default=16, gt=0)
    session_queue_size: int = Field(
        default=100,
        description="Pending pushes allowed per websocket before it is dropped as stalled",
        gt=0,
    )
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def kafka_bootstrap_servers(self) -> list[str]:
        return [broker.strip() for broker in self.kafka_brokers.split(",") if broker.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
