"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OAuth 1.0a credentials issued by https://dev.zaim.net
    zaim_consumer_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("ZAIM_CONSUMER_KEY", "zaim_consumer_key"),
    )
    zaim_consumer_secret: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("ZAIM_CONSUMER_SECRET", "zaim_consumer_secret"),
    )
    zaim_access_token: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("ZAIM_ACCESS_TOKEN", "zaim_access_token"),
    )
    zaim_access_token_secret: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices(
            "ZAIM_ACCESS_TOKEN_SECRET", "zaim_access_token_secret"
        ),
    )

    zaim_base_url: str = Field(
        default="https://api.zaim.net",
        validation_alias=AliasChoices("ZAIM_BASE_URL", "zaim_base_url"),
    )
    request_timeout: float = Field(
        default=30.0,
        validation_alias=AliasChoices("ZAIM_TIMEOUT", "timeout"),
        ge=1,
    )
    user_agent: str = Field(
        default="zaim-mcp/1.0",
        validation_alias=AliasChoices("ZAIM_USER_AGENT", "user_agent"),
    )

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )
    log_dir: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("LOG_DIR", "log_dir"),
    )
    log_retention_hours: int = Field(
        default=48,
        ge=0,
        validation_alias=AliasChoices("LOG_RETENTION_HOURS", "log_retention_hours"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["PROJECT_ROOT", "Settings", "get_settings"]
