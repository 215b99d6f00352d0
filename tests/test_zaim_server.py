"""Tests for the Zaim MCP server tools."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import TypeAdapter, ValidationError

from zaim_mcp.mcp_servers import zaim_server
from zaim_mcp.zaim_client import ZaimAPIError, ZaimConfigError, ZaimNetworkError


def _get_fn(tool):
    """Get the underlying async function from a FunctionTool."""
    return tool.fn if hasattr(tool, "fn") else tool


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.put = AsyncMock()
    client.delete = AsyncMock()

    async def fake_get_client():
        return client

    monkeypatch.setattr(zaim_server, "_get_client", fake_get_client)
    return client


@pytest.mark.asyncio
async def test_check_auth_status_success(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {"me": {"id": 1, "login": "taro", "name": "Taro"}}

    result = await _get_fn(zaim_server.check_auth_status)()

    fake_client.get.assert_awaited_once_with("/v2/home/user/verify")
    assert result["is_authenticated"] is True
    assert result["user"] == {"id": 1, "login": "taro", "name": "Taro"}


@pytest.mark.asyncio
async def test_check_auth_status_reports_api_error(fake_client: MagicMock) -> None:
    fake_client.get.side_effect = ZaimAPIError(401, "Unauthorized")

    result = await _get_fn(zaim_server.check_auth_status)()

    assert result["is_authenticated"] is False
    assert result["user"] is None
    assert "401 - Unauthorized" in result["message"]


@pytest.mark.asyncio
async def test_check_auth_status_rejects_incomplete_user(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {"me": {"id": 1}}

    result = await _get_fn(zaim_server.check_auth_status)()

    assert result["is_authenticated"] is False
    assert "Unexpected response shape" in result["message"]


@pytest.mark.asyncio
async def test_get_user_info_returns_present_fields(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {
        "me": {"id": 1, "name": "Taro", "input_count": 42, "day": "2020-01-01"}
    }

    result = await _get_fn(zaim_server.get_user_info)()

    assert result["success"] is True
    assert result["user"] == {"id": 1, "name": "Taro", "input_count": 42, "day": "2020-01-01"}


@pytest.mark.asyncio
async def test_get_money_records_builds_query(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {"money": [{"id": 1}, {"id": 2}]}

    result = await _get_fn(zaim_server.get_money_records)(
        mode="payment", start_date="2024-01-01", end_date="2024-01-31"
    )

    fake_client.get.assert_awaited_once_with(
        "/v2/home/money",
        {
            "mode": "payment",
            "start_date": "2024-01-01",
            "end_date": "2024-01-31",
            "limit": 20,
            "page": 1,
        },
    )
    assert result["count"] == 2
    assert result["success"] is True
    assert result["message"] == "Retrieved 2 record(s)"


@pytest.mark.asyncio
async def test_get_money_records_invalid_shape(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {}

    result = await _get_fn(zaim_server.get_money_records)()

    assert result == {
        "records": [],
        "count": 0,
        "success": False,
        "message": (
            "Failed to retrieve records: Unexpected response shape: "
            "expected an array under 'money', got nothing"
        ),
    }


@pytest.mark.asyncio
async def test_get_money_records_network_error(fake_client: MagicMock) -> None:
    fake_client.get.side_effect = ZaimNetworkError("Network error occurred: timed out")

    result = await _get_fn(zaim_server.get_money_records)()

    assert result["success"] is False
    assert "timed out" in result["message"]


@pytest.mark.asyncio
async def test_create_payment_omits_unset_fields(fake_client: MagicMock) -> None:
    fake_client.post.return_value = {"money": {"id": 99, "amount": 1500}}

    result = await _get_fn(zaim_server.create_payment)(
        amount=1500, date="2024-01-15", category_id=101, genre_id=10101, place="Cafe"
    )

    fake_client.post.assert_awaited_once_with(
        "/v2/home/money/payment",
        {
            "amount": 1500,
            "date": "2024-01-15",
            "category_id": 101,
            "genre_id": 10101,
            "place": "Cafe",
        },
    )
    assert result == {
        "record": {"id": 99, "amount": 1500},
        "success": True,
        "message": "Created payment record",
    }


@pytest.mark.asyncio
async def test_create_income_unwraps_array_response(fake_client: MagicMock) -> None:
    fake_client.post.return_value = {"money": [{"id": 5}]}

    result = await _get_fn(zaim_server.create_income)(
        amount=300000, date="2024-01-25", category_id=11, to_account_id=2
    )

    assert fake_client.post.await_args.args[0] == "/v2/home/money/income"
    assert result["record"] == {"id": 5}


@pytest.mark.asyncio
async def test_create_transfer_reports_api_error(fake_client: MagicMock) -> None:
    fake_client.post.side_effect = ZaimAPIError(400, "Invalid account")

    result = await _get_fn(zaim_server.create_transfer)(
        amount=1000, date="2024-01-15", from_account_id=1, to_account_id=2
    )

    assert result["record"] is None
    assert result["success"] is False
    assert result["message"] == (
        "Failed to create transfer record: Zaim API Error: 400 - Invalid account"
    )


@pytest.mark.asyncio
async def test_update_money_record_requires_genre_for_payment(fake_client: MagicMock) -> None:
    result = await _get_fn(zaim_server.update_money_record)(id=12, mode="payment", amount=500)

    fake_client.put.assert_not_awaited()
    assert result["success"] is False
    assert "genre_id is required" in result["message"]


@pytest.mark.asyncio
async def test_update_money_record_sends_mapping(fake_client: MagicMock) -> None:
    fake_client.put.return_value = {"money": {"id": 12}}

    result = await _get_fn(zaim_server.update_money_record)(
        id=12, mode="income", amount=500, comment="bonus"
    )

    fake_client.put.assert_awaited_once_with(
        "/v2/home/money/income/12", {"mapping": 1, "amount": 500, "comment": "bonus"}
    )
    assert result["success"] is True


@pytest.mark.asyncio
async def test_delete_money_record(fake_client: MagicMock) -> None:
    fake_client.delete.return_value = {"money": {"id": 12, "mode": "transfer"}}

    result = await _get_fn(zaim_server.delete_money_record)(id=12, mode="transfer")

    fake_client.delete.assert_awaited_once_with("/v2/home/money/transfer/12")
    assert result["deleted_record"] == {"id": 12, "mode": "transfer"}
    assert result["message"] == "Deleted record"


@pytest.mark.parametrize(
    ("tool_name", "path", "field"),
    [
        ("get_user_categories", "/v2/home/category", "categories"),
        ("get_user_genres", "/v2/home/genre", "genres"),
        ("get_user_accounts", "/v2/home/account", "accounts"),
        ("get_currencies", "/v2/currency", "currencies"),
    ],
)
@pytest.mark.asyncio
async def test_master_data_tools(
    fake_client: MagicMock, tool_name: str, path: str, field: str
) -> None:
    fake_client.get.return_value = {field: [{"id": 1}, {"id": 2}, {"id": 3}]}

    result = await _get_fn(getattr(zaim_server, tool_name))()

    fake_client.get.assert_awaited_once_with(path, None)
    assert result[field] == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert result["count"] == 3
    assert result["success"] is True


@pytest.mark.asyncio
async def test_default_categories_pass_mode(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {"categories": []}

    result = await _get_fn(zaim_server.get_default_categories)(mode="income")

    fake_client.get.assert_awaited_once_with("/v2/category", {"mode": "income"})
    assert result["count"] == 0
    assert result["success"] is True


@pytest.mark.asyncio
async def test_default_genres_failure_keeps_empty_payload(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {"genres": "oops"}

    result = await _get_fn(zaim_server.get_default_genres)(mode="payment")

    assert result["genres"] == []
    assert result["count"] == 0
    assert result["success"] is False


@pytest.mark.asyncio
async def test_missing_credentials_reported_by_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_create():
        raise ZaimConfigError(["ZAIM_CONSUMER_KEY"], "Missing required environment variable(s): ZAIM_CONSUMER_KEY")

    monkeypatch.setattr(zaim_server, "_client", None)
    monkeypatch.setattr(zaim_server, "create_zaim_client", fail_create)

    result = await _get_fn(zaim_server.get_currencies)()

    assert result["success"] is False
    assert "ZAIM_CONSUMER_KEY" in result["message"]
    assert zaim_server._client is None


@pytest.mark.asyncio
async def test_get_client_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    created = []

    def fake_create():
        created.append(object())
        return created[-1]

    monkeypatch.setattr(zaim_server, "_client", None)
    monkeypatch.setattr(zaim_server, "create_zaim_client", fake_create)

    first = await zaim_server._get_client()
    second = await zaim_server._get_client()

    assert first is second
    assert len(created) == 1


@pytest.mark.asyncio
async def test_check_auth_status_accepts_integer_day(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {
        "me": {"id": 1, "name": "Taro", "login": "taro", "day": 1}
    }

    result = await _get_fn(zaim_server.check_auth_status)()

    assert result["is_authenticated"] is True
    assert result["user"] == {"id": 1, "login": "taro", "name": "Taro"}


@pytest.mark.asyncio
async def test_get_user_info_reports_wrongly_typed_user(fake_client: MagicMock) -> None:
    fake_client.get.return_value = {"me": {"id": 1, "name": 123}}

    result = await _get_fn(zaim_server.get_user_info)()

    assert result["user"] is None
    assert result["success"] is False
    assert "Unexpected response shape" in result["message"]


@pytest.mark.parametrize("value", [float("inf"), float("nan"), 0, -5])
def test_amount_rejects_non_finite_and_non_positive(value: float) -> None:
    with pytest.raises(ValidationError):
        TypeAdapter(zaim_server.Amount).validate_python(value)


def test_amount_accepts_positive_value() -> None:
    assert TypeAdapter(zaim_server.Amount).validate_python(1500) == 1500
