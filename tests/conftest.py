"""Shared test fixtures — a fake Umami upstream behind httpx.MockTransport."""
from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.umami.client import UmamiClient
from src.umami.credentials import UmamiCredentials

UMAMI_BASE = "https://umami.test"
WEBSITE_ID = "site-1"


def ms(*args) -> int:
    """Epoch millis for a UTC datetime(*args)."""
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


def iso(*args) -> str:
    return datetime(*args, tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")


class FakeUmami:
    """In-memory stand-in for the handful of Umami endpoints we call.

    Events are filtered by name and by [startAt, endAt] like the real API.
    """

    def __init__(self):
        self.events: dict[str, list[dict]] = defaultdict(list)
        self.stats = {"pageviews": 0, "visitors": 0, "visits": 0, "bounces": 0, "totaltime": 0}
        # startAt → stats body, for windows that need different figures
        self.stats_by_start: dict[int, dict] = {}
        self.token = "tok-1"
        self.valid_tokens = {"tok-1"}
        self.login_status = 200
        self.fail_paths: dict[str, int] = {}
        self.calls: Counter = Counter()
        self.requests: list[httpx.Request] = []

    def add(self, name: str, created_at, visit_id: str = "v-0"):
        self.events[name].append({
            "id": f"e-{len(self.requests)}-{len(self.events[name])}",
            "websiteId": WEBSITE_ID,
            "eventName": name,
            "createdAt": created_at,
            "visitId": visit_id,
            "urlPath": "/",
        })

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for suffix, status in self.fail_paths.items():
            if path.endswith(suffix):
                return httpx.Response(status, json={"error": "boom"})

        if path == "/api/auth/login":
            self.calls["login"] += 1
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"error": "bad credentials"})
            return httpx.Response(200, json={"token": self.token, "user": {"username": "admin"}})

        auth = request.headers.get("authorization", "")
        if auth.removeprefix("Bearer ") not in self.valid_tokens:
            return httpx.Response(401, json={"error": "unauthorized"})

        if path == "/api/websites":
            self.calls["websites"] += 1
            return httpx.Response(200, json={"data": [{"id": WEBSITE_ID, "name": "AlarmOne"}]})

        if path == f"/api/websites/{WEBSITE_ID}/events":
            self.calls["events"] += 1
            params = request.url.params
            start, end = int(params["startAt"]), int(params["endAt"])
            name = params.get("event")
            names = [name] if name else list(self.events)
            data = [
                e for n in names for e in self.events.get(n, [])
                if start <= _to_ms(e["createdAt"]) <= end
            ]
            return httpx.Response(200, json={"data": data[: int(params["pageSize"])], "count": len(data)})

        if path == f"/api/websites/{WEBSITE_ID}/stats":
            self.calls["stats"] += 1
            start = int(request.url.params["startAt"])
            return httpx.Response(200, json=self.stats_by_start.get(start, self.stats))

        return httpx.Response(404, json={"error": "not found"})


def _to_ms(value) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp() * 1000)


@pytest.fixture
def fake_umami() -> FakeUmami:
    return FakeUmami()


@pytest_asyncio.fixture
async def umami_client(fake_umami):
    http = httpx.AsyncClient(base_url=UMAMI_BASE, transport=httpx.MockTransport(fake_umami.handler))
    credentials = UmamiCredentials(http, username="admin", password="secret")
    client = UmamiClient(http, credentials, page_size=1000)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def client(umami_client):
    """HTTP client for the dashboard app, wired to the fake upstream."""
    from src.api.main import app
    from src.analytics.routes import get_umami_client

    app.dependency_overrides[get_umami_client] = lambda: umami_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_umami_client, None)

