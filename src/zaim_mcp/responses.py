"""Narrow loosely typed Zaim payloads into the shape each tool expects."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .zaim_client import ZaimError


class ZaimResponseShapeError(ZaimError):
    """Raised when a 2xx payload does not carry the expected field."""

    def __init__(self, field: str, expected: str, actual: Any):
        self.field = field
        self.expected = expected
        super().__init__(
            f"Unexpected response shape: expected {expected} under '{field}', "
            f"got {_describe(actual)}"
        )


class ZaimUser(BaseModel):
    """The ``me`` object returned by ``/v2/home/user/verify``."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    login: Optional[str] = None
    profile_image_url: Optional[str] = None
    input_count: Optional[int] = None
    repeat_count: Optional[int] = None
    day: Optional[int | str] = None


def _describe(value: Any) -> str:
    if value is None:
        return "nothing"
    if isinstance(value, dict):
        return "an object"
    if isinstance(value, list):
        return "an array"
    return type(value).__name__


def _field(payload: Any, field: str) -> Any:
    if not isinstance(payload, dict):
        raise ZaimResponseShapeError(field, "a JSON object envelope", payload)
    return payload.get(field)


def expect_object(payload: Any, field: str) -> dict[str, Any]:
    value = _field(payload, field)
    if not isinstance(value, dict):
        raise ZaimResponseShapeError(field, "an object", value)
    return value


def expect_list(payload: Any, field: str) -> list[dict[str, Any]]:
    value = _field(payload, field)
    if not isinstance(value, list):
        raise ZaimResponseShapeError(field, "an array", value)
    if not all(isinstance(item, dict) for item in value):
        raise ZaimResponseShapeError(field, "an array of objects", value)
    return value


def expect_record(payload: Any, field: str) -> dict[str, Any]:
    """Return a single record that may arrive bare or wrapped in an array."""

    value = _field(payload, field)
    if isinstance(value, list):
        if value and isinstance(value[0], dict):
            return value[0]
        raise ZaimResponseShapeError(field, "a non-empty array of objects", value)
    if isinstance(value, dict):
        return value
    raise ZaimResponseShapeError(field, "an object", value)


def expect_user(payload: Any) -> ZaimUser:
    data = expect_object(payload, "me")
    if not data.get("id") or not data.get("name"):
        raise ZaimResponseShapeError("me", "a user with id and name", data)
    try:
        return ZaimUser.model_validate(data)
    except ValidationError as exc:
        raise ZaimResponseShapeError("me", "a user record", data) from exc


__all__ = [
    "ZaimResponseShapeError",
    "ZaimUser",
    "expect_list",
    "expect_object",
    "expect_record",
    "expect_user",
]
