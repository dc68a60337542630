"""Client configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Client configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        env_prefix="NOTIFICATION_SYNC_",
        extra="ignore",
    )

    api_base_url: str = Field(
        default="http://localhost:8000/api",
        description="Base URL of the REST surface exposing /notifications",
        min_length=1,
    )
    websocket_url: str | None = Field(
        default=None,
        description="Websocket endpoint streaming notification frames; push is disabled when unset",
    )
    access_token: str | None = Field(
        default=None,
        description="Bearer token sent with REST requests and as the websocket ?token= parameter",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every individual HTTP request",
        gt=0,
    )
    poll_interval_seconds: float = Field(
        default=60.0,
        description="Interval between unread counter refreshes",
        gt=0,
    )
    list_limit: int = Field(
        default=10,
        description="Number of notifications requested when the list surface refreshes",
        gt=0,
    )
    read_max_retries: int = Field(default=2, ge=0)
    read_max_delay_seconds: float = Field(default=30.0, gt=0)
    command_max_retries: int = Field(default=1, ge=0)
    command_max_delay_seconds: float = Field(default=10.0, gt=0)
    retry_base_delay_seconds: float = Field(default=1.0, gt=0)
    mark_all_read_confirmations: tuple[float, ...] = Field(
        default=(0.1, 0.5, 1.5, 3.0),
        description="Offsets, in seconds, of the refreshes that confirm a mark-all-read",
    )
    mark_read_confirmations: tuple[float, ...] = Field(default=(0.5,))
    delete_confirmations: tuple[float, ...] = Field(default=(0.5,))
    notice_history_size: int = Field(
        default=50,
        description="Number of user-facing notices kept in memory",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_confirmation_offsets(self) -> "Settings":
        for name in (
            "mark_all_read_confirmations",
            "mark_read_confirmations",
            "delete_confirmations",
        ):
            offsets = getattr(self, name)
            if any(offset < 0 for offset in offsets):
                raise ValueError(f"{name.upper()} must not contain negative offsets")
            if list(offsets) != sorted(offsets):
                raise ValueError(f"{name.upper()} must be in increasing order")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached client settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
