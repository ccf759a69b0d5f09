"""Umami credential provider — bearer token + website id, fetched lazily and cached.

There is no TTL: a token lives until `invalidate()` is called (the client does
that on a 401) or the process restarts. Login and website lookup are
single-flight, so concurrent dashboard requests never log in twice.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from src.umami.errors import MalformedResponseError, UpstreamAuthError, UpstreamFetchError

logger = logging.getLogger(__name__)


class UmamiCredentials:
    """Holds the Umami login state for one upstream."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        username: str,
        password: str,
        website_id: Optional[str] = None,
    ):
        self.http = http
        self.username = username
        self.password = password
        self._token: Optional[str] = None
        self._website_id: Optional[str] = website_id or None
        self._token_lock = asyncio.Lock()
        self._website_lock = asyncio.Lock()

    @property
    def has_token(self) -> bool:
        return self._token is not None

    async def get_token(self) -> str:
        if self._token:
            return self._token
        async with self._token_lock:
            # Another caller may have logged in while we waited
            if not self._token:
                self._token = await self._login()
            return self._token

    def invalidate(self, token: Optional[str] = None) -> None:
        """Forget the token; the next get_token() logs in again.

        With `token`, only forget it if it is still the cached one, so a late
        401 for an old token never discards a freshly minted one.
        """
        if token is not None and token != self._token:
            return
        if self._token:
            logger.info("Invalidating cached Umami token")
        self._token = None

    async def get_website_id(self) -> str:
        if self._website_id:
            return self._website_id
        async with self._website_lock:
            if not self._website_id:
                self._website_id = await self._resolve_website_id()
            return self._website_id

    async def _login(self) -> str:
        logger.info("Logging in to Umami as %s", self.username)
        try:
            resp = await self.http.post(
                "/api/auth/login",
                json={"username": self.username, "password": self.password},
            )
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"Umami login request failed: {e}") from e

        if resp.status_code != 200:
            raise UpstreamAuthError(
                f"Umami login rejected ({resp.status_code})", status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamAuthError("Umami login returned a non-JSON body") from e

        token = data.get("token") if isinstance(data, dict) else None
        if not token or not isinstance(token, str):
            raise UpstreamAuthError("Umami login response has no token")
        return token

    async def _resolve_website_id(self) -> str:
        token = await self.get_token()
        try:
            resp = await self.http.get(
                "/api/websites", headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"Umami websites request failed: {e}") from e

        if resp.status_code == 401:
            self.invalidate(token)
            raise UpstreamAuthError("Umami rejected the cached token", status_code=401)
        if resp.status_code != 200:
            raise UpstreamFetchError(
                f"Umami websites returned {resp.status_code}", status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError("Umami websites returned a non-JSON body") from e

        websites = data.get("data") if isinstance(data, dict) else None
        if not isinstance(websites, list) or not websites:
            raise MalformedResponseError("Umami websites response lists no websites")
        first = websites[0]
        website_id = first.get("id") if isinstance(first, dict) else None
        if not website_id:
            raise MalformedResponseError("First Umami website has no id")

        logger.info("Resolved Umami website id %s", website_id)
        return website_id
