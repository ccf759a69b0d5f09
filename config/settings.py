"""App settings — loaded from environment."""
from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # API
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Umami upstream
    UMAMI_URL = os.getenv("UMAMI_URL", "https://ubm.echopie.com").rstrip("/")
    UMAMI_USERNAME = os.getenv("UMAMI_USERNAME", "admin")
    UMAMI_PASSWORD = os.getenv("UMAMI_PASSWORD", "umami")
    # Skip the /api/websites lookup when set
    UMAMI_WEBSITE_ID = os.getenv("UMAMI_WEBSITE_ID", "")
    UMAMI_PAGE_SIZE = int(os.getenv("UMAMI_PAGE_SIZE", "1000"))
    UMAMI_TIMEOUT_SECONDS = float(os.getenv("UMAMI_TIMEOUT_SECONDS", "30"))

    # Dashboard
    DASHBOARD_TIMEZONE = os.getenv("DASHBOARD_TIMEZONE", "")  # IANA name, empty = server local
    DASHBOARD_LOCALE = os.getenv("DASHBOARD_LOCALE", "zh")  # "zh" or "en"

    # CORS origins (comma-separated, or * for dev)
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
    ]

    # Observability
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

    # Logging
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
