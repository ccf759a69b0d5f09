"""Dashboard metrics API — GET /metrics."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.analytics.dashboard import build_dashboard
from src.analytics.windows import local_timezone, resolve_window
from src.umami.client import UmamiClient
from src.umami.errors import UmamiError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["metrics"])

FAILURE_BODY = {"error": "Failed to fetch Umami data"}


def get_umami_client(request: Request) -> UmamiClient:
    """The shared client opened and closed by the app lifespan (overridden in tests)."""
    client = getattr(request.app.state, "umami_client", None)
    if client is None:
        raise RuntimeError("Umami client is not initialised; the app lifespan has not run")
    return client


@router.get("/metrics")
async def get_metrics(
    range: Optional[str] = Query("7", description="24h | today | week | month | <days> | custom"),
    start_at: Optional[str] = Query(None, alias="startAt", description="Custom window start (epoch ms)"),
    end_at: Optional[str] = Query(None, alias="endAt", description="Custom window end (epoch ms)"),
    client: UmamiClient = Depends(get_umami_client),
):
    """Summary cards, daily charts and breakdowns for one time window.

    Any upstream failure yields a single generic 500; the kind of failure is
    only visible in the logs.
    """
    tz = local_timezone(settings.DASHBOARD_TIMEZONE)
    window = resolve_window(range, start_at, end_at, tz=tz)
    try:
        dashboard = await build_dashboard(
            client, window, range, tz=tz, locale=settings.DASHBOARD_LOCALE,
        )
    except UmamiError as e:
        logger.error(
            "Umami %s error for range=%s: %s", e.kind, range, e,
            extra={"upstream_error": e.kind, "status_code": e.status_code},
        )
        return JSONResponse(status_code=500, content=FAILURE_BODY)
    except Exception:
        logger.exception("Failed to build dashboard for range=%s", range)
        return JSONResponse(status_code=500, content=FAILURE_BODY)

    return dashboard.model_dump(by_alias=True)
