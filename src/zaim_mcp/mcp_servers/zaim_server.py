"""MCP server for Zaim household ledger integration.

Tools provided
--------------
* ``zaim_check_auth_status`` / ``zaim_get_user_info`` - verify the access token
  and read the profile via ``/v2/home/user/verify``.
* ``zaim_get_money_records`` - list payment, income and transfer records.
* ``zaim_create_payment`` / ``zaim_create_income`` / ``zaim_create_transfer`` -
  add ledger records.
* ``zaim_update_money_record`` / ``zaim_delete_money_record`` - edit or remove a
  record addressed by mode and id.
* ``zaim_get_user_categories`` / ``zaim_get_user_genres`` /
  ``zaim_get_user_accounts`` - the user's own master data.
* ``zaim_get_default_categories`` / ``zaim_get_default_genres`` /
  ``zaim_get_currencies`` - Zaim's built-in master data.

Every tool returns a dict carrying ``message`` and either ``success`` or, for
the auth check, ``is_authenticated``. Zaim failures
(missing credentials, network, API rejections, unexpected payloads) are
reported in that dict instead of being raised.

Required environment variables: ``ZAIM_CONSUMER_KEY``,
``ZAIM_CONSUMER_SECRET``, ``ZAIM_ACCESS_TOKEN``, ``ZAIM_ACCESS_TOKEN_SECRET``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated, Any, Literal, Optional

from fastmcp import FastMCP
from pydantic import Field

from zaim_mcp.responses import expect_list, expect_record, expect_user
from zaim_mcp.services.zaim_auth import create_zaim_client
from zaim_mcp.zaim_client import ZaimApiClient, ZaimError

logger = logging.getLogger(__name__)

# Default port for HTTP transport
DEFAULT_HTTP_PORT = 9011

RecordMode = Literal["payment", "income", "transfer"]
MasterMode = Literal["payment", "income"]
Amount = Annotated[
    float, Field(gt=0, allow_inf_nan=False, description="Amount of money")
]
DateString = Annotated[str, Field(description="Date in YYYY-MM-DD format")]

mcp = FastMCP("zaim")

_client: Optional[ZaimApiClient] = None
_client_lock = asyncio.Lock()


async def _get_client() -> ZaimApiClient:
    """Return the process-wide Zaim client, creating it on first use."""

    global _client
    if _client is not None:
        return _client

    async with _client_lock:
        if _client is None:
            _client = create_zaim_client()
    return _client


def _compact(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def _failure(action: str, exc: Exception, **empty: Any) -> dict[str, Any]:
    logger.info("Zaim tool failed to %s: %s", action, exc)
    return {**empty, "success": False, "message": f"Failed to {action}: {exc}"}


@mcp.tool("zaim_check_auth_status")
async def check_auth_status() -> dict[str, Any]:
    """Check whether the configured Zaim access token is valid."""

    try:
        client = await _get_client()
        user = expect_user(await client.get("/v2/home/user/verify"))
    except ZaimError as exc:
        return {
            "is_authenticated": False,
            "user": None,
            "message": f"Authentication failed: {exc}",
        }

    return {
        "is_authenticated": True,
        "user": {"id": user.id, "login": user.login or "", "name": user.name},
        "message": "Authenticated successfully",
    }


@mcp.tool("zaim_get_user_info")
async def get_user_info() -> dict[str, Any]:
    """Retrieve the Zaim user's profile and usage statistics."""

    try:
        client = await _get_client()
        user = expect_user(await client.get("/v2/home/user/verify"))
    except ZaimError as exc:
        return _failure("retrieve user info", exc, user=None)

    return {
        "user": user.model_dump(exclude_none=True),
        "success": True,
        "message": "Retrieved user info",
    }


@mcp.tool("zaim_get_money_records")
async def get_money_records(
    mode: Optional[RecordMode] = None,
    start_date: Optional[DateString] = None,
    end_date: Optional[DateString] = None,
    category_id: Optional[int] = None,
    limit: Annotated[int, Field(ge=1, le=100)] = 20,
    page: Annotated[int, Field(ge=1)] = 1,
) -> dict[str, Any]:
    """List household ledger records (payments, income and transfers).

    Filter by record ``mode``, an inclusive ``start_date``/``end_date`` range
    and ``category_id``. ``limit`` caps the page size at 100 and ``page``
    starts at 1.
    """

    params = _compact(
        mode=mode,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        limit=limit,
        page=page,
    )
    try:
        client = await _get_client()
        records = expect_list(await client.get("/v2/home/money", params), "money")
    except ZaimError as exc:
        return _failure("retrieve records", exc, records=[], count=0)

    return {
        "records": records,
        "count": len(records),
        "success": True,
        "message": f"Retrieved {len(records)} record(s)",
    }


async def _create_record(mode: RecordMode, body: dict[str, Any]) -> dict[str, Any]:
    try:
        client = await _get_client()
        record = expect_record(await client.post(f"/v2/home/money/{mode}", body), "money")
    except ZaimError as exc:
        return _failure(f"create {mode} record", exc, record=None)

    return {"record": record, "success": True, "message": f"Created {mode} record"}


@mcp.tool("zaim_create_payment")
async def create_payment(
    amount: Amount,
    date: DateString,
    category_id: int,
    genre_id: Optional[int] = None,
    from_account_id: Optional[int] = None,
    place: Optional[str] = None,
    comment: Optional[str] = None,
    name: Optional[str] = None,
) -> dict[str, Any]:
    """Record a payment (expense) in Zaim.

    ``name`` is the item purchased and ``place`` the shop. Look up valid
    ``category_id``/``genre_id`` values with ``zaim_get_user_categories`` and
    ``zaim_get_user_genres``.
    """

    body = _compact(
        amount=amount,
        date=date,
        category_id=category_id,
        genre_id=genre_id,
        from_account_id=from_account_id,
        place=place,
        comment=comment,
        name=name,
    )
    return await _create_record("payment", body)


@mcp.tool("zaim_create_income")
async def create_income(
    amount: Amount,
    date: DateString,
    category_id: int,
    to_account_id: Optional[int] = None,
    place: Optional[str] = None,
    comment: Optional[str] = None,
) -> dict[str, Any]:
    """Record income in Zaim, optionally crediting ``to_account_id``."""

    body = _compact(
        amount=amount,
        date=date,
        category_id=category_id,
        to_account_id=to_account_id,
        place=place,
        comment=comment,
    )
    return await _create_record("income", body)


@mcp.tool("zaim_create_transfer")
async def create_transfer(
    amount: Amount,
    date: DateString,
    from_account_id: int,
    to_account_id: int,
    comment: Optional[str] = None,
) -> dict[str, Any]:
    """Record a transfer of money between two of the user's accounts."""

    body = _compact(
        amount=amount,
        date=date,
        from_account_id=from_account_id,
        to_account_id=to_account_id,
        comment=comment,
    )
    return await _create_record("transfer", body)


@mcp.tool("zaim_update_money_record")
async def update_money_record(
    id: int,
    mode: RecordMode,
    amount: Optional[Amount] = None,
    date: Optional[DateString] = None,
    category_id: Optional[int] = None,
    genre_id: Optional[int] = None,
    from_account_id: Optional[int] = None,
    to_account_id: Optional[int] = None,
    place: Optional[str] = None,
    comment: Optional[str] = None,
    name: Optional[str] = None,
) -> dict[str, Any]:
    """Update an existing ledger record. Only the supplied fields change.

    ``genre_id`` is required when ``mode`` is ``payment``.
    """

    if mode == "payment" and genre_id is None:
        return {
            "record": None,
            "success": False,
            "message": "Failed to update record: genre_id is required when mode is payment",
        }

    body = _compact(
        mapping=1,
        amount=amount,
        date=date,
        category_id=category_id,
        genre_id=genre_id,
        from_account_id=from_account_id,
        to_account_id=to_account_id,
        place=place,
        comment=comment,
        name=name,
    )
    try:
        client = await _get_client()
        record = expect_record(
            await client.put(f"/v2/home/money/{mode}/{id}", body), "money"
        )
    except ZaimError as exc:
        return _failure("update record", exc, record=None)

    return {"record": record, "success": True, "message": "Updated record"}


@mcp.tool("zaim_delete_money_record")
async def delete_money_record(id: int, mode: RecordMode) -> dict[str, Any]:
    """Permanently delete a ledger record. This cannot be undone."""

    try:
        client = await _get_client()
        record = expect_record(
            await client.delete(f"/v2/home/money/{mode}/{id}"), "money"
        )
    except ZaimError as exc:
        return _failure("delete record", exc, deleted_record=None)

    return {"deleted_record": record, "success": True, "message": "Deleted record"}


async def _list_master_data(
    path: str,
    field: str,
    label: str,
    params: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    try:
        client = await _get_client()
        items = expect_list(await client.get(path, params), field)
    except ZaimError as exc:
        return _failure(f"retrieve {label}", exc, **{field: [], "count": 0})

    return {
        field: items,
        "count": len(items),
        "success": True,
        "message": f"Retrieved {len(items)} {label}",
    }


@mcp.tool("zaim_get_user_categories")
async def get_user_categories() -> dict[str, Any]:
    """List the user's categories for payments and income."""

    return await _list_master_data("/v2/home/category", "categories", "categories")


@mcp.tool("zaim_get_user_genres")
async def get_user_genres() -> dict[str, Any]:
    """List the user's genres (sub-categories)."""

    return await _list_master_data("/v2/home/genre", "genres", "genres")


@mcp.tool("zaim_get_user_accounts")
async def get_user_accounts() -> dict[str, Any]:
    """List the user's accounts (wallets, bank accounts, cards)."""

    return await _list_master_data("/v2/home/account", "accounts", "accounts")


@mcp.tool("zaim_get_default_categories")
async def get_default_categories(mode: MasterMode) -> dict[str, Any]:
    """List Zaim's built-in categories for ``payment`` or ``income``."""

    return await _list_master_data(
        "/v2/category", "categories", "default categories", {"mode": mode}
    )


@mcp.tool("zaim_get_default_genres")
async def get_default_genres(mode: MasterMode) -> dict[str, Any]:
    """List Zaim's built-in genres for ``payment`` or ``income``."""

    return await _list_master_data(
        "/v2/genre", "genres", "default genres", {"mode": mode}
    )


@mcp.tool("zaim_get_currencies")
async def get_currencies() -> dict[str, Any]:
    """List the currencies Zaim supports."""

    return await _list_master_data("/v2/currency", "currencies", "currencies")


def run(
    transport: str = "stdio",
    host: str = "127.0.0.1",
    port: int = DEFAULT_HTTP_PORT,
) -> None:  # pragma: no cover - integration entrypoint
    """Run the MCP server with the specified transport."""
    if transport == "streamable-http":
        mcp.run(
            transport="streamable-http",
            host=host,
            port=port,
            json_response=True,
            stateless_http=True,
            uvicorn_config={"access_log": False},
        )
    else:
        mcp.run(transport="stdio")


__all__ = [
    "DEFAULT_HTTP_PORT",
    "check_auth_status",
    "create_income",
    "create_payment",
    "create_transfer",
    "delete_money_record",
    "get_currencies",
    "get_default_categories",
    "get_default_genres",
    "get_money_records",
    "get_user_accounts",
    "get_user_categories",
    "get_user_genres",
    "get_user_info",
    "mcp",
    "run",
    "update_money_record",
]
