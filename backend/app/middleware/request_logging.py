"""
Request/response logging middleware for tracking API interactions.
"""
import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.auth.magic_link import looks_like_token
from app.core.logging_config import request_id_context

logger = logging.getLogger(__name__)

REDACTED_SEGMENT = "[token]"


def redact_path(path: str) -> str:
    """
    Replace magic-link tokens in a URL path so they never reach the logs.

    Example:
        >>> redact_path("/v1/results/aaa.bbb.ccc")
        '/v1/results/[token]'
    """
    return "/".join(
        REDACTED_SEGMENT if looks_like_token(segment) else segment
        for segment in path.split("/")
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log incoming requests and outgoing responses.

    Logs method, redacted path, client host, status code and duration, and
    propagates a request ID (taken from X-Request-ID or generated) to every
    log entry written during the request. Query strings are never logged:
    they carry email addresses on the lookup endpoint.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and log details.

        Args:
            request: Incoming request
            call_next: Next middleware/endpoint in chain

        Returns:
            Response from the endpoint
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_context.set(request_id)

        start_time = time.time()
        method = request.method
        path = redact_path(str(request.url.path))
        client_host = request.client.host if request.client else "unknown"

        logger.info(
            "Incoming request",
            extra={"method": method, "path": path, "client_host": client_host},
        )

        try:
            response = await call_next(request)

            duration_ms = round((time.time() - start_time) * 1000, 2)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id

            extra_fields = {
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "client_host": client_host,
            }

            if status_code >= 500:
                logger.error("Server error response", extra=extra_fields)
            elif status_code >= 400:
                logger.warning("Client error response", extra=extra_fields)
            else:
                logger.info("Request completed", extra=extra_fields)

            return response
        finally:
            request_id_context.reset(token)
