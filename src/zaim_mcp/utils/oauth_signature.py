"""OAuth 1.0a HMAC-SHA1 request signing (RFC 5849, section 3.4).

Every function here is pure: no I/O, no clock, no randomness. Nonce and
timestamp generation belong to the caller so that identical inputs always
produce identical signatures.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: str) -> str:
    """Percent-encode ``value`` per RFC 3986 section 2.3.

    Only the unreserved characters (``A-Z a-z 0-9 - . _ ~``) pass through;
    spaces become ``%20``, never ``+``.
    """

    return quote(value, safe="~")


def normalize_parameters(parameters: Mapping[str, str]) -> str:
    """Return the normalized request parameter string.

    Keys and values are encoded first and the pairs are sorted by encoded key
    so the result does not depend on the mapping's insertion order.
    """

    encoded = sorted(
        (percent_encode(key), percent_encode(value))
        for key, value in parameters.items()
    )
    return "&".join(f"{key}={value}" for key, value in encoded)


def build_base_string(method: str, url: str, normalized_params: str) -> str:
    """Join the uppercased method, the encoded URL and the encoded parameters.

    ``url`` must not carry a query string; query parameters are part of
    ``normalized_params``.
    """

    return "&".join(
        [method.upper(), percent_encode(url), percent_encode(normalized_params)]
    )


def build_signing_key(consumer_secret: str, token_secret: Optional[str] = None) -> str:
    # The separator stays even without a token secret.
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"


@dataclass(frozen=True, slots=True)
class SignatureArtifacts:
    """Intermediate strings produced while signing one request."""

    normalized_parameters: str
    base_string: str
    signing_key: str
    signature: str


def compute_signature_artifacts(
    method: str,
    url: str,
    parameters: Mapping[str, str],
    consumer_secret: str,
    token_secret: Optional[str] = None,
) -> SignatureArtifacts:
    normalized = normalize_parameters(parameters)
    base_string = build_base_string(method, url, normalized)
    signing_key = build_signing_key(consumer_secret, token_secret)
    digest = hmac.new(
        signing_key.encode("utf-8"),
        base_string.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return SignatureArtifacts(
        normalized_parameters=normalized,
        base_string=base_string,
        signing_key=signing_key,
        signature=base64.b64encode(digest).decode("ascii"),
    )


def generate_signature(
    method: str,
    url: str,
    parameters: Mapping[str, str],
    consumer_secret: str,
    token_secret: Optional[str] = None,
) -> str:
    """Return the base64 HMAC-SHA1 signature for a request."""

    return compute_signature_artifacts(
        method, url, parameters, consumer_secret, token_secret
    ).signature


__all__ = [
    "OAUTH_VERSION",
    "SIGNATURE_METHOD",
    "SignatureArtifacts",
    "build_base_string",
    "build_signing_key",
    "compute_signature_artifacts",
    "generate_signature",
    "normalize_parameters",
    "percent_encode",
]
