"""Dashboard metrics aggregator.

Fans out every Umami query for a window concurrently, then derives the
summary cards, daily charts and breakdowns served by GET /metrics.

All-or-nothing: if any upstream call fails the whole document fails, the
dashboard never renders partial numbers.
"""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import tzinfo
from typing import Optional

from src.analytics import events as ev
from src.analytics.aggregation import (
    classify_purchases,
    conversion_rate,
    daily_buckets,
    onboarding_funnel,
    percent_change,
    purchase_funnel,
    visit_ids,
)
from src.analytics.windows import range_label
from src.models.dashboard import (
    Breakdown,
    Charts,
    DashboardResponse,
    NamedCount,
    PurchaseClicks,
    PurchaseSummary,
    RangeInfo,
    Summary,
)
from src.models.events import TimeWindow
from src.umami.client import UmamiClient

logger = logging.getLogger(__name__)

_ALARM_TYPE_NAMES = {
    "zh": ("添加", "编辑", "删除"),
    "en": ("Added", "Edited", "Deleted"),
}


async def build_dashboard(
    client: UmamiClient,
    window: TimeWindow,
    token: Optional[str],
    tz: tzinfo,
    locale: str = "zh",
) -> DashboardResponse:
    """Fetch and aggregate every dashboard metric for `window`."""
    previous = window.comparison()
    started = time.monotonic()

    fetched = await asyncio.gather(
        client.get_events(previous, ev.NEW_USER),
        client.get_stats(window),
        client.get_stats(previous),
        *(client.get_events(window, name) for name in ev.CURRENT_WINDOW_EVENTS),
    )
    prev_new_users, stats, prev_stats = fetched[:3]
    current = dict(zip(ev.CURRENT_WINDOW_EVENTS, fetched[3:]))

    logger.info(
        "Fetched %d Umami queries for %s..%s in %.0fms",
        len(fetched), window.start_at, window.end_at, (time.monotonic() - started) * 1000,
    )

    new_users = len(current[ev.NEW_USER])
    daily_active = len(current[ev.DAILY_ACTIVE])
    # No daily-active events tracked → fall back to unique visitors
    active_users = daily_active if daily_active > 0 else stats.visitors

    successes = current[ev.PURCHASE_SUCCESS]
    annual_clicks = current[ev.PURCHASE_ANNUAL_CLICK]
    lifetime_clicks = current[ev.PURCHASE_LIFETIME_CLICK]
    monthly_clicks = current[ev.PURCHASE_MONTHLY_CLICK]
    purchases = classify_purchases(
        successes,
        annual_visits=visit_ids(annual_clicks),
        lifetime_visits=visit_ids(lifetime_clicks),
        monthly_visits=visit_ids(monthly_clicks),
    )

    alarms_added = len(current[ev.ALARM_ADD])
    alarms_edited = len(current[ev.ALARM_EDIT])
    alarms_deleted = len(current[ev.ALARM_DELETE])

    summary = Summary(
        app_launches=len(current[ev.APP_LAUNCH]),
        new_users=new_users,
        new_users_change=percent_change(new_users, len(prev_new_users)),
        active_users=active_users,
        visitors=stats.visitors,
        visitor_change=percent_change(stats.visitors, prev_stats.visitors),
        pageviews=stats.pageviews,
        bounces=stats.bounces,
        bounce_rate=conversion_rate(stats.bounces, stats.visits),
        avg_time=stats.avg_time,
        purchases=PurchaseSummary(
            total=purchases.total,
            annual=purchases.annual,
            lifetime=purchases.lifetime,
            monthly=purchases.monthly,
            unknown=purchases.unknown,
        ),
        vip_users=purchases.total,
        annual_vip=purchases.annual,
        lifetime_vip=purchases.lifetime,
        conversion_rate=conversion_rate(len(successes), stats.visitors),
        purchase_funnel=purchase_funnel(
            clicks=len(annual_clicks) + len(lifetime_clicks) + len(monthly_clicks),
            success=len(successes),
            failed=len(current[ev.PURCHASE_FAILED]),
            cancel=len(current[ev.PURCHASE_CANCEL]),
        ),
        onboarding=onboarding_funnel(
            appear=len(current[ev.ONBOARDING_APPEAR]),
            skip=len(current[ev.ONBOARDING_SKIP]),
            complete=len(current[ev.ONBOARDING_COMPLETE]),
        ),
        alarms_added=alarms_added,
        alarms_edited=alarms_edited,
        alarms_deleted=alarms_deleted,
        rating_shown=len(current[ev.RATING_SHOWN]),
        iclick_cloud=len(current[ev.ICLOUD_CLICK]),
    )

    charts = Charts(
        new_users=daily_buckets(current[ev.NEW_USER], window, tz),
        active_users=daily_buckets(current[ev.DAILY_ACTIVE], window, tz),
        app_launches=daily_buckets(current[ev.APP_LAUNCH], window, tz),
        purchases=daily_buckets(successes, window, tz),
    )

    added, edited, deleted = _ALARM_TYPE_NAMES.get(locale, _ALARM_TYPE_NAMES["zh"])
    breakdown = Breakdown(
        alarm_types=[
            NamedCount(name=added, value=alarms_added),
            NamedCount(name=edited, value=alarms_edited),
            NamedCount(name=deleted, value=alarms_deleted),
        ],
        purchase_clicks=PurchaseClicks(
            annual=len(annual_clicks),
            lifetime=len(lifetime_clicks),
            monthly=len(monthly_clicks),
        ),
    )

    return DashboardResponse(
        summary=summary,
        charts=charts,
        breakdown=breakdown,
        range=RangeInfo(
            start_at=window.start_at,
            end_at=window.end_at,
            days=window.days,
            label=range_label(token, window, locale),
        ),
    )
