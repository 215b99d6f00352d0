"""Tests for response shape narrowing."""

import pytest

from zaim_mcp.responses import (
    ZaimResponseShapeError,
    expect_list,
    expect_object,
    expect_record,
    expect_user,
)
from zaim_mcp.zaim_client import ZaimError


def test_expect_list_returns_items() -> None:
    payload = {"categories": [{"id": 1, "name": "Food"}]}

    assert expect_list(payload, "categories") == [{"id": 1, "name": "Food"}]


def test_expect_list_accepts_empty_array() -> None:
    assert expect_list({"money": []}, "money") == []


def test_expect_list_missing_field() -> None:
    with pytest.raises(ZaimResponseShapeError) as excinfo:
        expect_list({}, "genres")

    assert excinfo.value.field == "genres"
    assert "expected an array under 'genres', got nothing" in str(excinfo.value)


def test_expect_list_rejects_object() -> None:
    with pytest.raises(ZaimResponseShapeError, match="got an object"):
        expect_list({"money": {"id": 1}}, "money")


def test_expect_object_rejects_non_envelope() -> None:
    with pytest.raises(ZaimResponseShapeError, match="JSON object envelope"):
        expect_object(["not", "an", "object"], "me")


def test_expect_record_unwraps_first_array_item() -> None:
    assert expect_record({"money": [{"id": 3}, {"id": 4}]}, "money") == {"id": 3}
    assert expect_record({"money": {"id": 5}}, "money") == {"id": 5}


def test_expect_record_rejects_empty_array() -> None:
    with pytest.raises(ZaimResponseShapeError):
        expect_record({"money": []}, "money")


def test_shape_error_is_zaim_error() -> None:
    with pytest.raises(ZaimError):
        expect_object({}, "me")


def test_expect_user_keeps_known_and_extra_fields() -> None:
    user = expect_user(
        {"me": {"id": 7, "name": "Taro", "login": "taro", "currency_code": "JPY"}}
    )

    assert user.id == 7
    assert user.name == "Taro"
    assert user.login == "taro"
    assert user.model_dump(exclude_none=True)["currency_code"] == "JPY"


def test_expect_user_requires_id_and_name() -> None:
    with pytest.raises(ZaimResponseShapeError, match="user with id and name"):
        expect_user({"me": {"id": 7}})


def test_expect_user_accepts_integer_day() -> None:
    user = expect_user({"me": {"id": 1, "name": "Taro", "login": "taro", "day": 1}})

    assert user.day == 1


def test_expect_user_rejects_wrongly_typed_field() -> None:
    with pytest.raises(ZaimResponseShapeError, match="a user record") as excinfo:
        expect_user({"me": {"id": 1, "name": 123}})

    assert excinfo.value.field == "me"
