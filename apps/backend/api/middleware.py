"""
Request tracking middleware for the render API
"""
import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

QUIET_PATHS = ('/api/health',)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every response with a request id and its processing time"""

    def __init__(self, app: ASGIApp, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests
        self.in_flight = 0

    def _should_log(self, path: str) -> bool:
        return self.log_requests and path not in QUIET_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        label = f"{request.method} {request.url.path} [{request_id}]"

        self.in_flight += 1
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.error(f"{label} failed after {elapsed_ms}ms: {e}")
            raise
        finally:
            self.in_flight -= 1

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(elapsed_ms)

        if self._should_log(request.url.path):
            size = response.headers.get("content-length", "?")
            logger.info(f"{label} -> {response.status_code} in {elapsed_ms}ms ({size} bytes, {self.in_flight} in flight)")
        return response
