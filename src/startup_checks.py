"""Startup validation — catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config.settings import settings
from src.analytics.windows import SUPPORTED_LOCALES

logger = logging.getLogger(__name__)

DEFAULT_UMAMI_PASSWORD = "umami"


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good)."""
    warnings: list[str] = []

    if settings.UMAMI_PASSWORD == DEFAULT_UMAMI_PASSWORD:
        warnings.append("UMAMI_PASSWORD is the Umami default — set a real password")

    if not settings.UMAMI_WEBSITE_ID:
        warnings.append("UMAMI_WEBSITE_ID not set — the first website in the account will be used")

    if settings.DASHBOARD_TIMEZONE:
        try:
            ZoneInfo(settings.DASHBOARD_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            warnings.append(
                f"DASHBOARD_TIMEZONE {settings.DASHBOARD_TIMEZONE!r} is unknown — using server local time"
            )

    if settings.DASHBOARD_LOCALE not in SUPPORTED_LOCALES:
        warnings.append(
            f"DASHBOARD_LOCALE {settings.DASHBOARD_LOCALE!r} unsupported — labels fall back to zh"
        )

    if "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to * — restrict in production")

    for w in warnings:
        logger.warning("⚠️  %s", w)

    if not warnings:
        logger.info("✅ All startup checks passed")

    return warnings
