"""
Lifespan, CORS and HTTP middleware.

Startup prepares logging, the cover and staging directories and the
database; shutdown releases the connection pool.
"""

from asyncio import get_running_loop
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger
from time import perf_counter, time
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from uvloop import Loop

from press.configs import file_logger, settings
from press.db import close_db, init_db
from press.monitoring import bind_request_id, clear_context, configure_logging
from press.utils.helpers import client_ip, route_label

logger = file_logger(getLogger(__name__))

REQUEST_ID_HEADER = "X-Request-ID"

# Staged files younger than this may belong to another live worker.
STALE_UPLOAD_SECONDS = 60 * 60

if settings.ENVIRONMENT == "development":
    install()


def purge_staging(max_age: float = STALE_UPLOAD_SECONDS) -> int:
    """Delete staged uploads older than `max_age` seconds."""
    cutoff = time() - max_age
    removed = 0
    for leftover in settings.UPLOADS_TMP_DIR.iterdir():
        if leftover.is_file() and leftover.stat().st_mtime < cutoff:
            leftover.unlink(missing_ok=True)
            removed += 1
    return removed


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    configure_logging()
    logger.info(f"Starting {app.title} {app.version}")

    settings.COVERS_DIR.mkdir(parents=True, exist_ok=True)
    settings.UPLOADS_TMP_DIR.mkdir(parents=True, exist_ok=True)
    if removed := purge_staging():
        logger.warning(f"Removed {removed} stale staged upload(s)")

    try:
        await init_db()
    except Exception:
        logger.exception("Database unavailable at startup")
        raise

    logger.info(f"uvloop active: {isinstance(get_running_loop(), Loop)}")
    logger.info(f"Covers stored in {settings.COVERS_DIR.resolve()}")
    logger.info(f"Public base URL {settings.PUBLIC_BASE_URL}")

    yield

    await close_db()
    logger.info(f"{app.title} stopped")


def configure_cors(app: FastAPI) -> None:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    if settings.PRODUCTION_FRONTEND_URL:
        origins.append(settings.PRODUCTION_FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log with timing; every event of the request carries its id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        bind_request_id(request_id)
        label = route_label(request)
        started = perf_counter()
        logger.info(f"{label} from {client_ip(request)}")

        try:
            response = await call_next(request)
        finally:
            clear_context()

        logger.info(f"{label} -> {response.status_code} in {perf_counter() - started:.3f}s")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response
