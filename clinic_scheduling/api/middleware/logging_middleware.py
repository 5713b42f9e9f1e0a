"""
Access log for the scheduling API.

Every request gets a correlation ID, taken from ``X-Correlation-ID`` when the
caller sends one. The ID is stored on ``request.state``, attached to each log
record and echoed on the response together with the handling time.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
TIMING_HEADER = "X-Response-Time-Ms"

# Health checks and browser noise; still tagged, never logged
QUIET_PATHS: tuple[str, ...] = ("/health", "/favicon.ico")


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per appointment request and one per response."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()
        request.state.correlation_id = correlation_id
        path = request.url.path

        if path.startswith(QUIET_PATHS):
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        extra = {"correlation_id": correlation_id}
        label = f"[{correlation_id}] {request.method} {path}"
        started = time.perf_counter()
        logger.info(f"{label} received", extra=extra)

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"{label} failed after {elapsed_ms:.2f}ms: {e}", extra=extra)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        # 4xx covers conflicts and rejected bookings
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"{label} -> {response.status_code} in {elapsed_ms:.2f}ms", extra=extra)

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[TIMING_HEADER] = f"{elapsed_ms:.2f}"
        return response
