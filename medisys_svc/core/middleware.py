"""
FastAPI middleware for request logging.

LoggingMiddleware gives every request a short id, logs its start and
completion with timing, and returns the id in the X-Request-ID header so
client-side reports can be matched with server logs. A caller that sends
its own X-Request-ID keeps it.
"""

import logging
import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import set_request_id, clear_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(request: Request) -> str:
    """Use the caller's request id if it is well-formed, otherwise generate one."""
    incoming = request.headers.get(REQUEST_ID_HEADER)
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each patient API call with its request id and duration."""

    # Probes and docs are polled often and carry no patient data
    QUIET_PATHS = frozenset({"/health", "/ready", "/docs", "/redoc", "/openapi.json"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request)
        set_request_id(request_id)
        try:
            return await self._log_request(request, call_next, request_id)
        finally:
            clear_request_id()

    async def _log_request(self, request: Request, call_next: Callable, request_id: str) -> Response:
        path = request.url.path
        quiet = path in self.QUIET_PATHS
        request_info = {
            "method": request.method,
            "path": path,
            "client": request.client.host if request.client else None,
        }
        if not quiet:
            logger.info("Request started", extra=request_info)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error while serving request", extra=request_info)
            raise
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if not quiet:
            logger.log(
                logging.WARNING if response.status_code >= 400 else logging.INFO,
                f"{request.method} {path} -> {response.status_code}",
                extra={**request_info, "status_code": response.status_code, "duration_ms": elapsed_ms},
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
