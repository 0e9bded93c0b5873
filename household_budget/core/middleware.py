"""
Request logging middleware.

Every request gets an ``X-Request-ID`` (taken from the client or generated)
that is attached to all log records emitted while it is handled, so engine
warnings can be traced back to the request that caused them.
"""
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from household_budget.core.logging import logger

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_SECONDS = 2.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and duration."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        client_ip = request.client.host if request.client else None
        started = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            response = await call_next(request)
            duration = time.perf_counter() - started

            summary = (
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {duration:.3f}s (client {client_ip})"
            )
            if response.status_code >= 500:
                logger.error(f"Request failed: {summary}")
            elif duration > SLOW_REQUEST_SECONDS:
                logger.warning(f"Slow request: {summary}")
            else:
                logger.info(f"Request: {summary}")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
