"""Tests for GET /metrics and the app-level endpoints."""
from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from src.analytics import events as ev
from src.analytics.routes import get_umami_client
from src.api.main import app
from src.umami.errors import MalformedResponseError
from tests.conftest import iso, ms

START = ms(2026, 10, 10)
END = ms(2026, 10, 17)


@pytest.mark.asyncio
async def test_metrics_custom_window(client, fake_umami):
    fake_umami.add(ev.NEW_USER, iso(2026, 10, 12, 12))
    fake_umami.add(ev.NEW_USER, iso(2026, 10, 14, 12))
    fake_umami.add(ev.PURCHASE_SUCCESS, iso(2026, 10, 13, 12), visit_id="v1")
    fake_umami.add(ev.PURCHASE_MONTHLY_CLICK, iso(2026, 10, 13, 11), visit_id="v1")
    fake_umami.stats = {"pageviews": 9, "visitors": 4, "visits": 5, "bounces": 1, "totaltime": 100}

    resp = await client.get(f"/metrics?range=custom&startAt={START}&endAt={END}")
    assert resp.status_code == 200
    data = resp.json()

    assert data["summary"]["newUsers"] == 2
    assert data["summary"]["visitors"] == 4
    assert data["summary"]["purchases"]["monthly"] == 1
    assert data["summary"]["conversionRate"] == "25.00"
    assert sum(b["count"] for b in data["charts"]["newUsers"]) == 2
    assert data["range"]["startAt"] == START
    assert data["range"]["endAt"] == END
    assert data["range"]["days"] == 7
    assert data["range"]["label"] == "过去 7 天"


@pytest.mark.asyncio
async def test_metrics_passes_window_upstream(client, fake_umami):
    await client.get(f"/metrics?startAt={START}&endAt={END}")
    stats_starts = {
        r.url.params["startAt"] for r in fake_umami.requests if r.url.path.endswith("/stats")
    }
    assert stats_starts == {str(START), str(START - (END - START))}


@pytest.mark.asyncio
async def test_metrics_default_range(client):
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    r = resp.json()["range"]
    assert r["endAt"] - r["startAt"] == 7 * 24 * 60 * 60 * 1000
    assert r["label"] == "过去 7 天"


@pytest.mark.asyncio
async def test_metrics_malformed_range_falls_back(client):
    resp = await client.get("/metrics?range=banana")
    assert resp.status_code == 200
    r = resp.json()["range"]
    assert r["endAt"] - r["startAt"] == 7 * 24 * 60 * 60 * 1000


@pytest.mark.asyncio
async def test_metrics_preset_label(client):
    resp = await client.get("/metrics?range=today")
    assert resp.status_code == 200
    assert resp.json()["range"]["label"] == "今天"


@pytest.mark.asyncio
async def test_metrics_response_keys(client):
    data = (await client.get("/metrics?range=30")).json()
    assert set(data) == {"summary", "charts", "breakdown", "range"}
    assert {"newUsers", "newUsersChange", "activeUsers", "visitorChange", "purchaseFunnel",
            "onboarding", "alarmsAdded", "ratingShown", "iclickCloud"} <= set(data["summary"])
    assert len(data["charts"]["newUsers"]) >= 30
    assert data["range"]["days"] == 30


@pytest.mark.asyncio
async def test_auth_failure_is_generic_500(client, fake_umami, caplog):
    fake_umami.login_status = 401
    with caplog.at_level(logging.ERROR, logger="src.analytics.routes"):
        resp = await client.get("/metrics?range=7")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch Umami data"}
    assert any(getattr(r, "upstream_error", None) == "auth" for r in caplog.records)


@pytest.mark.asyncio
async def test_upstream_outage_is_generic_500(client, fake_umami, caplog):
    fake_umami.fail_paths["/events"] = 503
    with caplog.at_level(logging.ERROR, logger="src.analytics.routes"):
        resp = await client.get("/metrics?range=7")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch Umami data"}
    assert any(getattr(r, "upstream_error", None) == "fetch" for r in caplog.records)


class _BrokenClient:
    def __init__(self, exc: Exception):
        self.exc = exc

    async def get_events(self, window, event_name=None):
        raise self.exc

    async def get_stats(self, window):
        raise self.exc


@pytest.mark.asyncio
async def test_malformed_upstream_is_generic_500(client):
    app.dependency_overrides[get_umami_client] = lambda: _BrokenClient(MalformedResponseError("bad json"))
    resp = await client.get("/metrics")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch Umami data"}


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500(client):
    app.dependency_overrides[get_umami_client] = lambda: _BrokenClient(RuntimeError("boom"))
    resp = await client.get("/metrics")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch Umami data"}


@pytest.mark.asyncio
async def test_client_comes_from_the_lifespan():
    request = SimpleNamespace(app=app)
    async with app.router.lifespan_context(app):
        shared = get_umami_client(request)
        assert shared is app.state.umami_client
        assert get_umami_client(request) is shared
    assert shared.http.is_closed
    del app.state.umami_client


def test_client_without_lifespan_is_an_error():
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
    with pytest.raises(RuntimeError):
        get_umami_client(request)


# ── App-level endpoints ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_dashboard_page(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    assert "/metrics?range=" in resp.text


def test_running_main_module_serves_with_uvicorn(monkeypatch):
    import runpy

    import uvicorn

    from config.settings import settings

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    runpy.run_module("src.api.main", run_name="__main__")

    assert calls == [("src.api.main:app", {"host": settings.API_HOST, "port": settings.API_PORT})]
