"""Application configuration management."""

from pydantic import AnyUrl, ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: AnyUrl
    transaction_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline for a single atomic unit of work",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False

    # Redis (notification queue)
    redis_url: str = "redis://localhost:6379/0"

    # Lifecycle
    default_application_source: str = "job_portal"
    reschedule_grace_minutes: int = Field(default=5, ge=0, le=60)

    # Notifications
    notifications_enabled: bool = True
    notification_queue: str = "hiring-notifications"
    notification_webhook_url: str | None = Field(
        default=None,
        description="Endpoint receiving delivered notification events",
    )

    # Interview reminders
    reminder_enabled: bool = True
    reminder_lead_hours: int = Field(default=24, ge=1, le=168)
    reminder_interval_minutes: int = Field(default=30, ge=1, le=1440)
    reminder_timezone: str = "UTC"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
