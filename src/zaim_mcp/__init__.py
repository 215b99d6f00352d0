"""MCP server exposing the Zaim household ledger API with OAuth 1.0a signing."""

from .zaim_client import (
    OAuthCredentials,
    ZaimAPIError,
    ZaimApiClient,
    ZaimConfigError,
    ZaimError,
    ZaimNetworkError,
)

__all__ = [
    "OAuthCredentials",
    "ZaimAPIError",
    "ZaimApiClient",
    "ZaimConfigError",
    "ZaimError",
    "ZaimNetworkError",
]
