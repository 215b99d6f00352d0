"""Resolve Zaim OAuth credentials from settings and build API clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pydantic import SecretStr

from zaim_mcp.config import Settings, get_settings
from zaim_mcp.zaim_client import OAuthCredentials, ZaimApiClient, ZaimConfigError

# Environment variable name -> Settings attribute
_ENV_FIELDS: dict[str, str] = {
    "ZAIM_CONSUMER_KEY": "zaim_consumer_key",
    "ZAIM_CONSUMER_SECRET": "zaim_consumer_secret",
    "ZAIM_ACCESS_TOKEN": "zaim_access_token",
    "ZAIM_ACCESS_TOKEN_SECRET": "zaim_access_token_secret",
}

REQUIRED_ENV_VARS: tuple[str, ...] = tuple(_ENV_FIELDS)


@dataclass(frozen=True)
class EnvironmentCheck:
    is_valid: bool
    missing_vars: list[str] = field(default_factory=list)
    message: str = ""


def _secret_value(secret: Optional[SecretStr]) -> str:
    if secret is None:
        return ""
    return secret.get_secret_value().strip()


def _missing_env_vars(settings: Settings) -> list[str]:
    return [
        env_name
        for env_name, attr in _ENV_FIELDS.items()
        if not _secret_value(getattr(settings, attr))
    ]


def check_environment(settings: Settings | None = None) -> EnvironmentCheck:
    """Report which credential variables are missing without raising."""

    missing = _missing_env_vars(settings or get_settings())
    if not missing:
        return EnvironmentCheck(
            is_valid=True,
            message="All required environment variables are set",
        )
    return EnvironmentCheck(
        is_valid=False,
        missing_vars=missing,
        message=f"Missing required environment variables: {', '.join(missing)}",
    )


def get_zaim_credentials(settings: Settings | None = None) -> OAuthCredentials:
    """Return trimmed credentials or raise ``ZaimConfigError``."""

    settings = settings or get_settings()
    missing = _missing_env_vars(settings)
    if missing:
        raise ZaimConfigError(
            missing,
            f"Missing required environment variable(s): {', '.join(missing)}",
        )
    return OAuthCredentials(
        consumer_key=_secret_value(settings.zaim_consumer_key),
        consumer_secret=_secret_value(settings.zaim_consumer_secret),
        access_token=_secret_value(settings.zaim_access_token),
        access_token_secret=_secret_value(settings.zaim_access_token_secret),
    )


def create_zaim_client(settings: Settings | None = None) -> ZaimApiClient:
    settings = settings or get_settings()
    return ZaimApiClient(
        get_zaim_credentials(settings),
        base_url=settings.zaim_base_url,
        user_agent=settings.user_agent,
        timeout=settings.request_timeout,
    )


__all__ = [
    "EnvironmentCheck",
    "REQUIRED_ENV_VARS",
    "check_environment",
    "create_zaim_client",
    "get_zaim_credentials",
]
