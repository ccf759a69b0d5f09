"""Umami event/stats data models — everything here is per-request and transient."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DAY_MS = 24 * 60 * 60 * 1000


class Event(BaseModel):
    """A single custom event as returned by Umami's events endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    event_name: Optional[str] = Field(None, alias="eventName")
    # Umami sends ISO strings; epoch millis are accepted too
    created_at: datetime = Field(..., alias="createdAt")
    visit_id: Optional[str] = Field(None, alias="visitId")

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


@dataclass(frozen=True)
class TimeWindow:
    """A [start_at, end_at] pair in epoch milliseconds."""

    start_at: int
    end_at: int

    @property
    def duration_ms(self) -> int:
        return self.end_at - self.start_at

    @property
    def days(self) -> int:
        return math.ceil(self.duration_ms / DAY_MS)

    def comparison(self) -> "TimeWindow":
        """Window of identical length ending where this one starts."""
        return TimeWindow(self.start_at - self.duration_ms, self.start_at)


class DailyBucket(BaseModel):
    date: str  # YYYY-MM-DD
    count: int = Field(0, ge=0)


def _figure(raw: dict, key: str) -> float:
    """Read a stats figure that may be a bare number or {"value": n}."""
    value = raw.get(key)
    if isinstance(value, dict):
        value = value.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


class WebsiteStats(BaseModel):
    """Aggregate figures from /api/websites/{id}/stats."""

    visitors: int = 0
    pageviews: int = 0
    visits: int = 0
    bounces: int = 0
    avg_time: float = 0  # seconds per visit

    @classmethod
    def from_upstream(cls, raw: dict[str, Any]) -> "WebsiteStats":
        visits = int(_figure(raw, "visits"))
        if "time" in raw:
            avg_time = _figure(raw, "time")
        else:
            total = _figure(raw, "totaltime")
            avg_time = round(total / visits, 2) if visits > 0 else 0
        return cls(
            visitors=int(_figure(raw, "visitors")),
            pageviews=int(_figure(raw, "pageviews")),
            visits=visits,
            bounces=int(_figure(raw, "bounces")),
            avg_time=avg_time,
        )


class PurchaseBreakdown(BaseModel):
    annual: int = 0
    lifetime: int = 0
    monthly: int = 0
    unknown: int = 0

    @property
    def total(self) -> int:
        return self.annual + self.lifetime + self.monthly + self.unknown
