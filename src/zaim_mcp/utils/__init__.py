"""Utility helpers for the Zaim client."""

from .oauth_signature import (
    build_base_string,
    build_signing_key,
    generate_signature,
    normalize_parameters,
    percent_encode,
)

__all__ = [
    "build_base_string",
    "build_signing_key",
    "generate_signature",
    "normalize_parameters",
    "percent_encode",
]
