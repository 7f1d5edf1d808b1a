"""Logging setup and development-mode request logging."""

import logging
import time

from fastapi import FastAPI, Request

from insurance_api.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"

request_logger = logging.getLogger("insurance_api.requests")


def configure_logging(settings: Settings) -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    # pymongo is chatty at DEBUG (heartbeats, pool events).
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def add_request_logging(app: FastAPI) -> None:
    """Log METHOD path -> status for every request (dev only)."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        request_logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
