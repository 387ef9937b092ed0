"""
FastAPI middleware for request correlation and logging.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lightsurvey.core.logging_config import request_id_var

logger = logging.getLogger(__name__)


class RequestCorrelationMiddleware(BaseHTTPMiddleware):
    """
    Give every request a correlation ID.

    The ID comes from the request header when the caller sends one, is
    exposed on ``request.state.request_id`` and in log records, and is
    echoed back in the response header.
    """

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        logger.info(f"Request started: {request.method} {request.url.path}")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"- Error: {type(e).__name__} - Duration: {duration_ms:.2f}ms",
                exc_info=True,
            )
            raise
        finally:
            request_id_var.reset(token)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers[self.header_name] = request_id
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Duration: {duration_ms:.2f}ms",
            extra={"request_id": request_id, "duration_ms": round(duration_ms, 2)},
        )
        return response
