"""Async client for the Zaim REST API with OAuth 1.0a request signing."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Literal, Mapping, Optional

import httpx

from .utils.oauth_signature import (
    OAUTH_VERSION,
    SIGNATURE_METHOD,
    generate_signature,
    percent_encode,
)

logger = logging.getLogger(__name__)

ZAIM_BASE_URL = "https://api.zaim.net"
DEFAULT_USER_AGENT = "zaim-mcp/1.0"
DEFAULT_TIMEOUT_SECONDS = 30.0
SERVICE_NAME = "Zaim"

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
ParamValue = str | int | float | bool | Decimal | None


class ZaimError(Exception):
    """Base class for every error raised while talking to Zaim."""


class ZaimConfigError(ZaimError):
    """Raised when the client is built from incomplete credentials."""

    def __init__(self, missing_fields: list[str], message: str | None = None):
        self.missing_fields = list(missing_fields)
        super().__init__(
            message or f"Missing required field(s): {', '.join(self.missing_fields)}"
        )


class ZaimNetworkError(ZaimError):
    """Raised when no response was received from Zaim."""


class ZaimAPIError(ZaimError):
    """Raised when Zaim answers with a non-2xx status."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{SERVICE_NAME} API Error: {status_code} - {detail}")


@dataclass(frozen=True, slots=True)
class OAuthCredentials:
    """Long-lived consumer and access token pairs."""

    consumer_key: str
    consumer_secret: str
    access_token: str
    access_token_secret: str

    def missing_fields(self) -> list[str]:
        return [
            field.name
            for field in fields(self)
            if not getattr(self, field.name) or not getattr(self, field.name).strip()
        ]


def stringify_value(value: ParamValue) -> str:
    """Render a parameter value exactly as it is signed and transmitted."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def stringify_params(params: Optional[Mapping[str, ParamValue]]) -> dict[str, str]:
    """Stringify every value, dropping keys whose value is ``None``."""

    if not params:
        return {}
    return {
        key: stringify_value(value) for key, value in params.items() if value is not None
    }


def generate_nonce() -> str:
    return uuid.uuid4().hex


def generate_timestamp() -> str:
    return str(int(time.time()))


def build_authorization_header(oauth_params: Mapping[str, str]) -> str:
    parts = ", ".join(
        f'{key}="{percent_encode(value)}"' for key, value in oauth_params.items()
    )
    return f"OAuth {parts}"


def encode_form_body(params: Mapping[str, str]) -> str:
    return "&".join(
        f"{percent_encode(key)}={percent_encode(value)}" for key, value in params.items()
    )


class ZaimApiClient:
    """Sign and execute one Zaim API request per call.

    The client keeps no per-call state: nonce and timestamp are generated
    inside each request, so calls may run concurrently on one instance.
    """

    def __init__(
        self,
        credentials: OAuthCredentials,
        *,
        base_url: str = ZAIM_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ):
        missing = credentials.missing_fields()
        if missing:
            raise ZaimConfigError(missing)

        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "ZaimApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def get(
        self, path: str, params: Optional[Mapping[str, ParamValue]] = None
    ) -> Any:
        return await self._request("GET", path, query=params)

    async def post(
        self, path: str, data: Optional[Mapping[str, ParamValue]] = None
    ) -> Any:
        return await self._request("POST", path, body=data)

    async def put(
        self, path: str, data: Optional[Mapping[str, ParamValue]] = None
    ) -> Any:
        return await self._request("PUT", path, body=data)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    def build_url(self, path: str, query: Mapping[str, str] | None = None) -> str:
        url = f"{self._base_url}{path}"
        if query:
            url = f"{url}?{encode_form_body(query)}"
        return url

    def sign_request(
        self,
        method: HttpMethod,
        url: str,
        params: Mapping[str, str],
    ) -> str:
        """Return the ``Authorization`` value for ``url`` (without query).

        ``params`` holds every body and query parameter that is sent.
        """

        credentials = self._credentials
        oauth_params = {
            "oauth_consumer_key": credentials.consumer_key,
            "oauth_nonce": generate_nonce(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": generate_timestamp(),
            "oauth_token": credentials.access_token,
            "oauth_version": OAUTH_VERSION,
        }
        signature = generate_signature(
            method,
            url,
            {**oauth_params, **params},
            credentials.consumer_secret,
            credentials.access_token_secret,
        )
        return build_authorization_header({**oauth_params, "oauth_signature": signature})

    async def _request(
        self,
        method: HttpMethod,
        path: str,
        *,
        query: Optional[Mapping[str, ParamValue]] = None,
        body: Optional[Mapping[str, ParamValue]] = None,
    ) -> Any:
        query_params = stringify_params(query)
        body_params = stringify_params(body) if method in ("POST", "PUT") else {}

        url = self.build_url(path, query_params)
        signing_url = self.build_url(path)
        headers = {
            "Authorization": self.sign_request(
                method, signing_url, {**body_params, **query_params}
            ),
            "User-Agent": self._user_agent,
        }

        content: str | None = None
        if method in ("POST", "PUT") and body is not None:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            content = encode_form_body(body_params)

        logger.debug("%s %s", method, path)
        try:
            response = await self._http_client.request(
                method, url, headers=headers, content=content
            )
        except httpx.RequestError as exc:
            logger.warning("Zaim request %s %s failed: %s", method, path, exc)
            raise ZaimNetworkError(f"Network error occurred: {exc}") from exc

        return self._handle_response(method, path, response)

    def _handle_response(self, method: str, path: str, response: httpx.Response) -> Any:
        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.is_success:
            detail = "Unknown error"
            if isinstance(payload, dict):
                detail = payload.get("message") or payload.get("error") or detail
            logger.warning(
                "Zaim API %s %s returned %s: %s",
                method,
                path,
                response.status_code,
                detail,
            )
            raise ZaimAPIError(response.status_code, str(detail))

        return payload


__all__ = [
    "DEFAULT_USER_AGENT",
    "OAuthCredentials",
    "SERVICE_NAME",
    "ZAIM_BASE_URL",
    "ZaimAPIError",
    "ZaimApiClient",
    "ZaimConfigError",
    "ZaimError",
    "ZaimNetworkError",
    "build_authorization_header",
    "encode_form_body",
    "generate_nonce",
    "generate_timestamp",
    "stringify_params",
    "stringify_value",
]
