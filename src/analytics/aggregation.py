"""Pure metric helpers — daily bucketing, change/ratio math, purchase attribution.

Nothing here touches the network; every function is a deterministic
function of its inputs, so the dashboard can be tested without Umami.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from src.models.dashboard import OnboardingFunnel, PurchaseFunnel
from src.models.events import DailyBucket, Event, PurchaseBreakdown, TimeWindow


def _local_date(epoch_ms: int, tz: tzinfo) -> date:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).astimezone(tz).date()


def daily_buckets(events: Iterable[Event], window: TimeWindow, tz: tzinfo) -> list[DailyBucket]:
    """Count events per local calendar day across the window, both ends inclusive.

    Every day in range is present (zero when empty), ascending. Events dated
    outside the range are dropped.
    """
    first = _local_date(window.start_at, tz)
    last = _local_date(window.end_at, tz)

    counts: dict[date, int] = {}
    day = first
    while day <= last:
        counts[day] = 0
        day += timedelta(days=1)

    for event in events:
        day = event.created_at.astimezone(tz).date()
        if day in counts:
            counts[day] += 1

    return [DailyBucket(date=d.isoformat(), count=c) for d, c in counts.items()]


def percent_change(current: float, previous: float) -> int:
    """Signed period-over-period change in whole percent.

    Rounds half up. Zero → something counts as +100, zero → zero as 0.
    """
    if previous > 0:
        return math.floor((current - previous) / previous * 100 + 0.5)
    return 100 if current > 0 else 0


def conversion_rate(numerator: float, denominator: float) -> str:
    """numerator / denominator as a percentage with two decimals ("0.00" on a zero denominator)."""
    if denominator <= 0:
        return "0.00"
    return f"{numerator / denominator * 100:.2f}"


def visit_ids(events: Iterable[Event]) -> set[str]:
    return {e.visit_id for e in events if e.visit_id}


def classify_purchases(
    successes: Iterable[Event],
    annual_visits: set[str],
    lifetime_visits: set[str],
    monthly_visits: set[str],
) -> PurchaseBreakdown:
    """Attribute each purchase success to the plan clicked in the same visit.

    A visit that clicked several plans counts for the first of annual,
    lifetime, monthly. Unmatched (or visit-less) successes are unknown.
    """
    breakdown = PurchaseBreakdown()
    for event in successes:
        visit: Optional[str] = event.visit_id
        if visit and visit in annual_visits:
            breakdown.annual += 1
        elif visit and visit in lifetime_visits:
            breakdown.lifetime += 1
        elif visit and visit in monthly_visits:
            breakdown.monthly += 1
        else:
            breakdown.unknown += 1
    return breakdown


def purchase_funnel(clicks: int, success: int, failed: int, cancel: int) -> PurchaseFunnel:
    return PurchaseFunnel(
        clicks=clicks,
        success=success,
        failed=failed,
        cancel=cancel,
        conversion_rate=conversion_rate(success, clicks),
    )


def onboarding_funnel(appear: int, skip: int, complete: int) -> OnboardingFunnel:
    return OnboardingFunnel(
        appear=appear,
        skip=skip,
        complete=complete,
        completion_rate=conversion_rate(complete, appear),
    )
