# src/daylist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task core depends on Protocols instead of concrete implementations.
This keeps the backend swappable and lets tests run against in-memory fakes.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol

Row = dict[str, Any]
NotifyVariant = Literal["default", "destructive"]


@dataclass(slots=True, frozen=True)
class User:
    id: str
    email: str | None = None


class RowStore(Protocol):
    """
    Generic per-table row API of the hosted backend.

    `columns` uses the PostgREST select syntax, so "*,subtasks(*)" embeds the
    related rows. Every method raises BackendError on failure.
    """

    async def select(
            self,
            table: str,
            *,
            columns: str = "*",
            filters: Mapping[str, Any] | None = None,
            order: str | None = None,
            descending: bool = False,
    ) -> list[Row]: ...

    async def insert(self, table: str, values: Mapping[str, Any], *, columns: str = "*") -> Row: ...

    async def update(
            self,
            table: str,
            row_id: str,
            values: Mapping[str, Any],
            *,
            columns: str = "*",
    ) -> Row: ...

    async def delete(self, table: str, row_id: str) -> None: ...


class SessionProvider(Protocol):
    """Current identity plus sign-in / sign-up / sign-out (raise AuthError on rejection)."""

    @property
    def user(self) -> User | None: ...

    @property
    def access_token(self) -> str | None: ...

    async def sign_in(self, email: str, password: str) -> User: ...
    async def sign_up(self, email: str, password: str) -> User | None: ...
    async def sign_out(self) -> None: ...


class Notifier(Protocol):
    """Non-blocking user notification (a toast in a GUI, a line in the console)."""

    def notify(self, title: str, description: str, *, variant: NotifyVariant = "default") -> None: ...
