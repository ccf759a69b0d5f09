"""AlarmOne Dashboard API — FastAPI proxy in front of Umami."""
from __future__ import annotations

import logging
import os

from src.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from src.analytics.routes import router as metrics_router
from src.umami.client import UmamiClient

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        send_default_pii=False,
    )

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate config, open the shared Umami client, close it on shutdown."""
    from src.startup_checks import validate_settings
    validate_settings()

    app.state.umami_client = UmamiClient.from_settings()
    logger.info("Umami client ready for %s", settings.UMAMI_URL)

    yield

    logger.info("Shutting down — closing Umami client...")
    await app.state.umami_client.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="AlarmOne Dashboard API",
    version=VERSION,
    description="Umami-backed usage, purchase and onboarding metrics for AlarmOne",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Request ID tracing
from src.middleware.request_id import RequestIDMiddleware
app.add_middleware(RequestIDMiddleware)


app.include_router(metrics_router)


# --- Dashboard page ---
from fastapi.responses import FileResponse

_static_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "static")


@app.get("/", include_in_schema=False)
async def dashboard_page():
    path = os.path.join(_static_dir, "dashboard.html")
    if not os.path.isfile(path):
        raise HTTPException(404, "Dashboard page not found")
    return FileResponse(path)


@app.get("/health")
async def health():
    """Liveness check — does not call Umami."""
    return {"status": "ok", "version": VERSION}


# --- Structured Error Responses ---

from fastapi import Request as FastAPIRequest
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: FastAPIRequest, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = " → ".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return JSONResponse(status_code=422, content={
        "error": "validation_error",
        "message": "Invalid request data",
        "details": errors,
    })


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: FastAPIRequest, exc: StarletteHTTPException):
    """Consistent error envelope for all HTTP errors."""
    return JSONResponse(status_code=exc.status_code, content={
        "error": exc.detail if isinstance(exc.detail, str) else "error",
        "message": exc.detail,
    })


@app.exception_handler(Exception)
async def unhandled_error_handler(request: FastAPIRequest, exc: Exception):
    """Catch-all for unhandled exceptions — never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
    })


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host=settings.API_HOST, port=settings.API_PORT)
