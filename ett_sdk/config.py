"""Configuration management using environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """SDK configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ETT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    environment: str = Field(default="development", description="Environment name")
    function_name: str = Field(
        default="ett-sdk", description="Name prefixed to operator notifications"
    )

    # Object store (persists refreshed tokens)
    object_store_base_url: str = Field(..., description="Base URL of the object store API")
    object_store_app_id: SecretStr = Field(..., description="X-API-KEY used for object store calls")

    # Operator notifications
    telegram_bot_token: SecretStr | None = Field(None, description="Telegram bot token")
    telegram_account_ids: str = Field(
        default="", description="Comma-separated list of Telegram chat ids to notify"
    )

    @property
    def account_ids(self) -> list[str]:
        """Telegram chat ids parsed from the comma-separated setting."""
        return [a.strip() for a in self.telegram_account_ids.split(",") if a.strip()]


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config()  # type: ignore
