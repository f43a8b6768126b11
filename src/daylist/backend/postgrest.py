# src/daylist/backend/postgrest.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from ..core.ports import Row
from ..errors import BackendError

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


async def error_message(response: ClientResponse) -> str:
    """Best human readable message from an error response body."""
    try:
        data = await response.json(content_type=None)
    except (ClientError, ValueError):
        data = None

    if isinstance(data, dict):
        for key in ("message", "error_description", "msg", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    try:
        text = (await response.text()).strip()
    except (ClientError, UnicodeDecodeError):
        text = ""
    return text or f"HTTP {response.status}"


def _eq(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{'true' if value else 'false'}"
    return f"eq.{value}"


class PostgrestRowStore:
    """
    RowStore over the PostgREST endpoint of a Supabase project.

    Requests are authorized with the signed-in user's access token when one is
    available (row level security scopes rows to that user), else the anon key.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        token_provider: TokenProvider | None = None,
        timeout: float = 15.0,
    ) -> None:
        if not base_url or not api_key:
            raise BackendError("SUPABASE_URL and SUPABASE_ANON_KEY are required")

        self._rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._token_provider = token_provider
        self.session: ClientSession = ClientSession(
            headers={
                "apikey": api_key,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=ClientTimeout(total=timeout),
        )

    async def __aenter__(self) -> PostgrestRowStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if not self.session.closed:
            await self.session.close()

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token or self._api_key}"}

    async def request(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
        prefer: str | None = None,
    ) -> Any:
        url = f"{self._rest_url}/{table}"
        headers = self._auth_headers()
        if prefer:
            headers["Prefer"] = prefer

        logger.debug("%s %s params=%s", method, table, params)
        try:
            async with self.session.request(
                method,
                url,
                params=dict(params or {}),
                json=dict(payload) if payload is not None else None,
                headers=headers,
            ) as response:
                if response.status >= 400:
                    message = await error_message(response)
                    raise BackendError(message, status=response.status)
                if response.status == 204:
                    return None
                return await response.json(content_type=None)
        except BackendError:
            raise
        except (ClientError, asyncio.TimeoutError) as e:
            raise BackendError(f"{method} {table} failed: {str(e) or e.__class__.__name__}") from e

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        params = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = _eq(value)
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"

        data = await self.request("GET", table, params=params)
        if not isinstance(data, list):
            raise BackendError(f"Unexpected response for {table} select")
        return data

    async def insert(self, table: str, values: Mapping[str, Any], *, columns: str = "*") -> Row:
        data = await self.request(
            "POST",
            table,
            params={"select": columns},
            payload=values,
            prefer="return=representation",
        )
        return self._single(data, table, "insert")

    async def update(
        self,
        table: str,
        row_id: str,
        values: Mapping[str, Any],
        *,
        columns: str = "*",
    ) -> Row:
        data = await self.request(
            "PATCH",
            table,
            params={"id": _eq(row_id), "select": columns},
            payload=values,
            prefer="return=representation",
        )
        return self._single(data, table, "update", status=404)

    async def delete(self, table: str, row_id: str) -> None:
        await self.request("DELETE", table, params={"id": _eq(row_id)})

    @staticmethod
    def _single(data: Any, table: str, op: str, *, status: int | None = None) -> Row:
        if isinstance(data, list):
            if len(data) != 1:
                raise BackendError(f"{table} {op} returned {len(data)} rows, expected 1", status=status)
            data = data[0]
        if not isinstance(data, dict):
            raise BackendError(f"Unexpected response for {table} {op}")
        return data
