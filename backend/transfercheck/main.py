# backend/transfercheck/main.py
from __future__ import annotations

"""
FastAPI application setup.

This module depends on:
- transfercheck.config.get_settings for configuration
- transfercheck.db.session.Base and engine for DB initialization
- transfercheck.api.api_router for route registration
- the error classifier for request-boundary failures
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transfercheck import models  # noqa: F401  (registers tables on Base)
from transfercheck.api import api_router
from transfercheck.api.health_check import log_metric
from transfercheck.config import get_settings
from transfercheck.db.session import Base, engine
from transfercheck.services.diagnostics.error_classifier import (
    HealthCheckError,
    RateLimitExceeded,
    build_fallback_report,
    map_error_to_stage,
)
from transfercheck.services.statsig_client import shutdown_statsig

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
)


# ---- CORS ----

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o).rstrip("/") for o in settings.allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Routes ----

app.include_router(api_router, prefix="/api")


# ---- Boundary errors ----


def _boundary_response(request: Request, exc: Exception) -> JSONResponse:
    classified = map_error_to_stage(exc)
    headers = (
        {"Retry-After": str(exc.retry_after)}
        if isinstance(exc, RateLimitExceeded)
        else None
    )

    if not request.url.path.startswith("/api/health-check"):
        return JSONResponse(
            status_code=classified.status,
            content={"ok": False, "error": classified.message},
            headers=headers,
        )

    # The body was never validated here, so protocol/host are unknown.
    log_metric(
        "unknown",
        "unknown",
        False,
        note="Failed before body parse (rate limit / invalid JSON / validation error).",
    )
    report = build_fallback_report(classified)
    return JSONResponse(
        status_code=classified.status,
        content=report.model_dump(mode="json", by_alias=True),
        headers=headers,
    )


@app.exception_handler(HealthCheckError)
def handle_health_check_error(request: Request, exc: HealthCheckError) -> JSONResponse:
    return _boundary_response(request, exc)


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _boundary_response(request, exc)


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _boundary_response(request, exc)


# ---- Lifecycle ----


@app.on_event("startup")
def on_startup() -> None:
    """
    Create the append-only event and waitlist tables on startup.
    """
    Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
def on_shutdown() -> None:
    shutdown_statsig()


# ---- Healthcheck ----


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}
