"""Umami REST client — raw event lists and aggregate stats for a time window."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from config.settings import settings
from src.models.events import Event, TimeWindow, WebsiteStats
from src.umami.credentials import UmamiCredentials
from src.umami.errors import MalformedResponseError, UpstreamFetchError

logger = logging.getLogger(__name__)


class UmamiClient:
    """Read-only access to one Umami website."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        credentials: UmamiCredentials,
        page_size: int = 1000,
    ):
        self.http = http
        self.credentials = credentials
        self.page_size = page_size

    @classmethod
    def from_settings(cls) -> "UmamiClient":
        http = httpx.AsyncClient(
            base_url=settings.UMAMI_URL,
            timeout=settings.UMAMI_TIMEOUT_SECONDS,
        )
        credentials = UmamiCredentials(
            http,
            username=settings.UMAMI_USERNAME,
            password=settings.UMAMI_PASSWORD,
            website_id=settings.UMAMI_WEBSITE_ID,
        )
        return cls(http, credentials, page_size=settings.UMAMI_PAGE_SIZE)

    async def close(self):
        await self.http.aclose()

    async def get_events(self, window: TimeWindow, event_name: Optional[str] = None) -> list[Event]:
        """Up to `page_size` events in the window, optionally filtered by name."""
        params: dict[str, Any] = {
            "startAt": str(window.start_at),
            "endAt": str(window.end_at),
            "pageSize": str(self.page_size),
        }
        if event_name:
            params["event"] = event_name

        body = await self._get_json("events", params)
        if not isinstance(body, dict):
            raise MalformedResponseError("Umami events response is not an object")
        records = body.get("data")
        if records is None:
            return []
        if not isinstance(records, list):
            raise MalformedResponseError("Umami events 'data' is not a list")
        try:
            return [Event.model_validate(r) for r in records]
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected Umami event record: {e}") from e

    async def get_stats(self, window: TimeWindow) -> WebsiteStats:
        params = {"startAt": str(window.start_at), "endAt": str(window.end_at)}
        body = await self._get_json("stats", params)
        if not isinstance(body, dict):
            raise MalformedResponseError("Umami stats response is not an object")
        return WebsiteStats.from_upstream(body)

    async def _get_json(self, resource: str, params: dict[str, Any]) -> Any:
        website_id = await self.credentials.get_website_id()
        path = f"/api/websites/{website_id}/{resource}"

        resp, token = await self._send(path, params)
        if resp.status_code == 401:
            # Token expired upstream, log in again and retry once
            self.credentials.invalidate(token)
            resp, _ = await self._send(path, params)

        if resp.status_code != 200:
            raise UpstreamFetchError(
                f"Umami {resource} returned {resp.status_code}", status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"Umami {resource} returned a non-JSON body") from e

    async def _send(self, path: str, params: dict[str, Any]) -> tuple[httpx.Response, str]:
        token = await self.credentials.get_token()
        try:
            resp = await self.http.get(
                path, params=params, headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"Umami request to {path} failed: {e}") from e
        return resp, token
