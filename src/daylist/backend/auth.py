# src/daylist/backend/auth.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from ..core.ports import User
from ..errors import AuthError
from .postgrest import error_message

logger = logging.getLogger(__name__)


def _user_from(data: Mapping[str, Any] | None) -> User | None:
    if not isinstance(data, Mapping):
        return None
    user_id = data.get("id")
    if not user_id:
        return None
    return User(id=str(user_id), email=data.get("email"))


class GoTrueSession:
    """
    SessionProvider backed by the Supabase auth (GoTrue) REST API.

    Holds the current user and access token in memory only.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        timeout: float = 15.0,
    ) -> None:
        if not base_url or not api_key:
            raise AuthError("SUPABASE_URL and SUPABASE_ANON_KEY are required")

        self._auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self._user: User | None = None
        self._access_token: str | None = None
        self.session: ClientSession = ClientSession(
            headers={"apikey": api_key, "Content-Type": "application/json"},
            timeout=ClientTimeout(total=timeout),
        )

    async def __aenter__(self) -> GoTrueSession:
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

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def access_token(self) -> str | None:
        return self._access_token

    async def _post(
        self,
        path: str,
        payload: Mapping[str, Any] | None = None,
        *,
        params: Mapping[str, str] | None = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            async with self.session.post(
                f"{self._auth_url}/{path}",
                json=dict(payload or {}),
                params=dict(params or {}),
                headers=headers,
            ) as response:
                if response.status >= 400:
                    raise AuthError(await error_message(response), status=response.status)
                if response.status == 204:
                    return {}
                data = await response.json(content_type=None)
                return data if isinstance(data, dict) else {}
        except AuthError:
            raise
        except (ClientError, asyncio.TimeoutError) as e:
            raise AuthError(f"Auth request failed: {str(e) or e.__class__.__name__}") from e

    def _adopt(self, data: Mapping[str, Any]) -> User | None:
        token = data.get("access_token")
        user = _user_from(data.get("user"))
        if token and user:
            self._access_token = str(token)
            self._user = user
            logger.info("Signed in user_id=%s", user.id)
        return user

    async def sign_in(self, email: str, password: str) -> User:
        data = await self._post(
            "token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        user = self._adopt(data)
        if user is None or self._access_token is None:
            raise AuthError("Sign-in response did not contain a session")
        return user

    async def sign_up(self, email: str, password: str) -> User | None:
        """
        Register a new account.

        With email confirmation enabled the server answers with the bare user and
        no session: the user is returned but stays signed out.
        """
        data = await self._post("signup", {"email": email, "password": password})
        if "access_token" in data:
            return self._adopt(data)
        return _user_from(data.get("user") if "user" in data else data)

    async def sign_out(self) -> None:
        token = self._access_token
        self._access_token = None
        self._user = None
        if not token:
            return
        try:
            await self._post("logout", token=token)
        except AuthError as e:
            logger.warning("Remote sign-out failed: %s", e)
