"""Response schema for GET /metrics — serialized with camelCase keys for the dashboard page."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.models.events import DailyBucket


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PurchaseSummary(_CamelModel):
    total: int
    annual: int
    lifetime: int
    monthly: int
    unknown: int


class PurchaseFunnel(_CamelModel):
    clicks: int
    success: int
    failed: int
    cancel: int
    conversion_rate: str


class OnboardingFunnel(_CamelModel):
    appear: int
    skip: int
    complete: int
    completion_rate: str


class Summary(_CamelModel):
    app_launches: int
    new_users: int
    new_users_change: int
    active_users: int
    visitors: int
    visitor_change: int
    pageviews: int
    bounces: int
    bounce_rate: str
    avg_time: float
    purchases: PurchaseSummary
    vip_users: int
    annual_vip: int
    lifetime_vip: int
    conversion_rate: str
    purchase_funnel: PurchaseFunnel
    onboarding: OnboardingFunnel
    alarms_added: int
    alarms_edited: int
    alarms_deleted: int
    rating_shown: int
    iclick_cloud: int


class Charts(_CamelModel):
    new_users: list[DailyBucket]
    active_users: list[DailyBucket]
    app_launches: list[DailyBucket]
    purchases: list[DailyBucket]


class NamedCount(_CamelModel):
    name: str
    value: int


class PurchaseClicks(_CamelModel):
    annual: int
    lifetime: int
    monthly: int


class Breakdown(_CamelModel):
    alarm_types: list[NamedCount]
    purchase_clicks: PurchaseClicks


class RangeInfo(_CamelModel):
    start_at: int
    end_at: int
    days: int
    label: str


class DashboardResponse(_CamelModel):
    summary: Summary
    charts: Charts
    breakdown: Breakdown
    range: RangeInfo
