"""
Oikos API

JSON backend for the Oikos website: public blog and project pages plus the
admin area that manages them.
"""

import logging
import time
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import get_settings
from api.errors import (
    AuthenticationError,
    InvalidCursorError,
    RecordNotFoundError,
    RecordValidationError,
    StoreError,
)
from api.middleware import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from api.routers import activity, auth, blogs, projects
from api.services.record_store import check_storage_connectivity

logger = logging.getLogger(__name__)

settings = get_settings()


def configure_logging(level: str) -> None:
    """Root logging with the request ID in every line."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIDLogFilter) for f in handler.filters):
            handler.addFilter(RequestIDLogFilter())


configure_logging(settings.log_level)

# Health check cache: (result_dict, timestamp)
_health_cache: tuple[dict[str, Any], float] | None = None
_HEALTH_CACHE_TTL = 30  # seconds


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    if not settings.session_secret or not settings.admin_users:
        logger.warning("Admin sign-in is not configured; admin routes will reject")
    yield


app = FastAPI(
    title="Oikos API",
    description="Blog and project content for the Oikos consulting website",
    version="0.1.0",
    lifespan=lifespan,
)

# Request ID (runs first, outermost middleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

# Routers
app.include_router(blogs.router, prefix="/api")
app.include_router(projects.router, prefix="/api")
app.include_router(activity.router, prefix="/api")
app.include_router(auth.router, prefix="/api")


@app.exception_handler(RecordValidationError)
async def record_validation_error(
    request: Request, exc: RecordValidationError
) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "errors": [asdict(e) for e in exc.errors]},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        # Drop the "body"/"query" prefix FastAPI adds to each location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append(
            {"field": ".".join(loc) or "body", "message": err.get("msg", "")}
        )
    message = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    return JSONResponse(status_code=400, content={"detail": message, "errors": errors})


@app.exception_handler(InvalidCursorError)
async def invalid_cursor_error(
    request: Request, exc: InvalidCursorError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RecordNotFoundError)
async def record_not_found_error(
    request: Request, exc: RecordNotFoundError
) -> JSONResponse:
    return JSONResponse(
        status_code=404, content={"detail": f"{exc.kind.capitalize()} not found"}
    )


@app.exception_handler(AuthenticationError)
async def authentication_error(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(StoreError)
async def store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(
        "Store failure on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _check_config() -> str:
    """Verify required configuration is loaded. Returns 'ok' or 'fail'."""
    s = get_settings()
    has_storage = s.azure_storage_connection_string or s.azure_storage_account
    if has_storage and s.azure_blog_container and s.azure_project_container:
        return "ok"
    return "fail"


def _run_health_checks() -> dict[str, Any]:
    """Run all health checks, returning the full response body."""
    global _health_cache
    now = time.time()
    if _health_cache is not None:
        cached_result, cached_at = _health_cache
        if now - cached_at < _HEALTH_CACHE_TTL:
            return cached_result

    config_status = _check_config()
    storage_status = "ok" if check_storage_connectivity() else "fail"

    checks = {"config": config_status, "storage": storage_status}
    failed = [k for k, v in checks.items() if v != "ok"]

    if failed:
        overall = "degraded"
        logger.warning("Health check degraded, failed: %s", ", ".join(failed))
    else:
        overall = "ok"

    result: dict[str, Any] = {
        "status": overall,
        "service": "oikos-api",
        "version": "0.1.0",
        "checks": checks,
    }
    _health_cache = (result, now)
    return result


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Health check verifying service dependencies."""
    result = _run_health_checks()
    status_code = 200 if result["status"] in ("ok", "degraded") else 503
    return JSONResponse(content=result, status_code=status_code)
