"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
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
        description="Timezone used to store and present datetimes",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    notification_default_expiry_days: int = Field(
        default=30,
        description="Retention window applied when a notification has no explicit expiry",
        gt=0,
    )
    vapid_public_key: str | None = Field(
        default=None, description="Public VAPID key handed to browsers"
    )
    vapid_private_key: str | None = Field(
        default=None, description="Private VAPID key used to sign Web Push requests"
    )
    vapid_subject: str = Field(
        default="mailto:support@example.com",
        description="Contact URI sent in the VAPID claims",
    )
    apns_key_id: str | None = Field(default=None, description="APNs signing key id")
    apns_team_id: str | None = Field(default=None, description="Apple developer team id")
    apns_key_path: str | None = Field(
        default=None, description="Path to the APNs .p8 signing key"
    )
    apns_bundle_id: str = Field(
        default="app.notification-hub.dashboard",
        description="Default APNs topic for Apple subscriptions",
    )
    push_ttl_seconds: int = Field(
        default=86400, description="Time-to-live for Web Push messages", ge=0
    )
    push_default_title: str = Field(default="Notification Hub")
    push_default_icon: str = Field(default="/logo/logo.png")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )
    realtime_enabled: bool = Field(
        default=True, description="Enable live propagation of notification changes"
    )
    archived_retention_days: int = Field(default=90, gt=0)
    read_retention_days: int = Field(default=60, gt=0)
    subscription_retention_days: int = Field(default=90, gt=0)

    @model_validator(mode="after")
    def _validate_push_credentials(self) -> "Settings":
        if bool(self.vapid_public_key) ^ bool(self.vapid_private_key):
            raise ValueError(
                "VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY must both be provided to enable Web Push"
            )
        if not self.vapid_subject.startswith(("mailto:", "https://")):
            raise ValueError("VAPID_SUBJECT must be a mailto: or https:// URI")
        apns_values = (self.apns_key_id, self.apns_team_id, self.apns_key_path)
        if any(apns_values) and not all(apns_values):
            raise ValueError(
                "APNS_KEY_ID, APNS_TEAM_ID and APNS_KEY_PATH must be provided together"
            )
        return self

    @property
    def web_push_enabled(self) -> bool:
        return bool(self.vapid_public_key and self.vapid_private_key)

    @property
    def apns_enabled(self) -> bool:
        return bool(self.apns_key_id and self.apns_team_id and self.apns_key_path)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
