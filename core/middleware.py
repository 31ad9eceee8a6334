"""
Request middleware for the Image Caption service.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from core.logging import get_logger, request_id_var

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a short request id, logs the upload size and outcome of each call,
    and returns the id in the X-Request-ID header.

    Errors are not handled here; the app's exception handlers turn them into
    the response envelope.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            started = time.perf_counter()
            content_type = request.headers.get("content-type", "-").split(";")[0]
            logger.info(
                f"{request.method} {request.url.path} from "
                f"{request.client.host if request.client else 'unknown'} "
                f"({content_type}, {request.headers.get('content-length', '0')} bytes)"
            )

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(f"{request.method} {request.url.path} failed after {time.perf_counter() - started:.3f}s: {e}")
                raise

            logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {time.perf_counter() - started:.3f}s")

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Content-Type-Options"] = "nosniff"
            return response
        finally:
            request_id_var.reset(token)
