"""Custom event names tracked by the AlarmOne app."""
from __future__ import annotations

NEW_USER = "new.user"
DAILY_ACTIVE = "user.daily.active"
APP_LAUNCH = "app.launch"

PURCHASE_SUCCESS = "setting.purchase.success"
PURCHASE_FAILED = "setting.purchase.failed"
PURCHASE_CANCEL = "setting.purchase.cancel"
PURCHASE_ANNUAL_CLICK = "setting.purchase.annual.click"
PURCHASE_LIFETIME_CLICK = "setting.purchase.lifetime.click"
PURCHASE_MONTHLY_CLICK = "setting.purchase.monthly.click"

ONBOARDING_APPEAR = "onboarding.appear"
ONBOARDING_SKIP = "onboarding.skip"
ONBOARDING_COMPLETE = "onboarding.complete"

ALARM_ADD = "alarm.add"
ALARM_EDIT = "alarm.edit"
ALARM_DELETE = "alarm.delete"

RATING_SHOWN = "rating.shown"
ICLOUD_CLICK = "setting.icloud.click"

# Fetched for the current window only; NEW_USER is also fetched for the
# comparison window.
CURRENT_WINDOW_EVENTS = (
    NEW_USER,
    DAILY_ACTIVE,
    APP_LAUNCH,
    PURCHASE_SUCCESS,
    PURCHASE_FAILED,
    PURCHASE_CANCEL,
    PURCHASE_ANNUAL_CLICK,
    PURCHASE_LIFETIME_CLICK,
    PURCHASE_MONTHLY_CLICK,
    ONBOARDING_APPEAR,
    ONBOARDING_SKIP,
    ONBOARDING_COMPLETE,
    ALARM_ADD,
    ALARM_EDIT,
    ALARM_DELETE,
    RATING_SHOWN,
    ICLOUD_CLICK,
)
