"""Range tokens → concrete time windows, plus the human label for each range.

Malformed tokens never raise: they fall back to the last 7 days, so the
dashboard always has something to show.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.models.events import DAY_MS, TimeWindow

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7
HOUR_MS = 60 * 60 * 1000

PRESET_TOKENS = ("24h", "today", "week", "month")

_LABELS = {
    "zh": {
        "24h": "过去 24 小时",
        "today": "今天",
        "week": "本周",
        "month": "本月",
        "days": "过去 {days} 天",
    },
    "en": {
        "24h": "Last 24 hours",
        "today": "Today",
        "week": "This week",
        "month": "This month",
        "days": "Last {days} days",
    },
}
SUPPORTED_LOCALES = tuple(_LABELS)

_LOCALTIME_PATH = "/etc/localtime"


def _server_timezone() -> tzinfo:
    """The host's own zone, DST rules included: $TZ, then /etc/localtime."""
    key = os.environ.get("TZ", "").lstrip(":")
    if key:
        try:
            return ZoneInfo(key)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("TZ=%r is not an IANA zone name, ignoring it", key)
    try:
        with open(_LOCALTIME_PATH, "rb") as f:
            return ZoneInfo.from_file(f, key="localtime")
    except (OSError, ValueError):
        # No zone database on this host: fixed offset, no DST
        return datetime.now().astimezone().tzinfo


def local_timezone(name: str = "") -> tzinfo:
    """The dashboard's "local" zone: `name` if it is a known IANA zone, else the server's."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown time zone %r, using server local time", name)
    return _server_timezone()


def _to_ms(dt: datetime) -> int:
    return round(dt.timestamp() * 1000)


def _local_midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _parse_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_days(token: Optional[str]) -> int:
    """Bare positive integer → that many days; anything else → DEFAULT_DAYS."""
    days = _parse_int(token)
    if days is None or days <= 0:
        return DEFAULT_DAYS
    return days


def resolve_window(
    token: Optional[str],
    start_at=None,
    end_at=None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> TimeWindow:
    """Turn a range token (or an explicit start/end pair) into a TimeWindow.

    An explicit pair wins when both values parse as integers and is used
    verbatim, with no ordering check.
    """
    custom_start, custom_end = _parse_int(start_at), _parse_int(end_at)
    if custom_start is not None and custom_end is not None:
        return TimeWindow(custom_start, custom_end)

    tz = tz or local_timezone()
    now = (now or datetime.now(tz)).astimezone(tz)
    end = _to_ms(now)

    if token == "24h":
        return TimeWindow(end - 24 * HOUR_MS, end)
    if token == "today":
        start = _local_midnight(now)
    elif token == "week":
        # weekday(): Monday=0 ... Sunday=6; weeks start on Sunday
        days_since_sunday = (now.weekday() + 1) % 7
        start = _local_midnight(now - timedelta(days=days_since_sunday))
    elif token == "month":
        start = _local_midnight(now.replace(day=1))
    else:
        return TimeWindow(end - parse_days(token) * DAY_MS, end)

    return TimeWindow(_to_ms(start), end)


def range_label(token: Optional[str], window: TimeWindow, locale: str = "zh") -> str:
    labels = _LABELS.get(locale, _LABELS["zh"])
    if token in PRESET_TOKENS:
        return labels[token]
    return labels["days"].format(days=window.days)
