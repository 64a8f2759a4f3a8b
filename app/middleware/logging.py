"""Logging middleware for request tracking and structured logging."""

import json
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

# Response headers copied into the request log line
_CONTEXT_HEADERS = {
    "X-Paper-Type": ("paper_type", str),
    "X-Question-Count": ("question_count", int),
    "X-Error-Kind": ("error_kind", str),
}


def configure_logging(level: str = "INFO") -> None:
    """Log bare messages to stderr: JSON request lines, plain service messages."""
    logging.basicConfig(
        level=level,
        format='%(message)s',  # Request lines are already JSON
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs request/response information in structured JSON format.

    Logs include:
    - Request ID (taken from X-Request-ID or generated)
    - HTTP method and path
    - Status code
    - Processing time
    - Client IP
    - Paper type, question count and error kind when the route reports them

    Does NOT log uploaded spreadsheets, question text or image bodies.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Process request and log structured information."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        log_data: Dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "user_ip": request.client.host if request.client else "unknown",
        }

        try:
            response = await call_next(request)
        except Exception as e:
            processing_time_ms = (time.time() - start_time) * 1000
            error_log = {
                **log_data,
                "status_code": 500,
                "processing_time_ms": round(processing_time_ms, 2),
                "error": str(e),
                "error_type": type(e).__name__,
                "message": f"Request failed: {request.method} {request.url.path}",
            }
            logger.error(json.dumps(error_log), exc_info=True)
            raise

        processing_time_ms = (time.time() - start_time) * 1000
        log_data.update({
            "status_code": response.status_code,
            "processing_time_ms": round(processing_time_ms, 2),
        })

        for header, (key, convert) in _CONTEXT_HEADERS.items():
            if header in response.headers:
                try:
                    log_data[key] = convert(response.headers[header])
                except ValueError:
                    pass  # Malformed header, leave it out of the log

        logger.info(json.dumps(log_data))

        response.headers["X-Request-ID"] = request_id
        return response


def get_request_id(request: Request) -> str:
    """Request ID assigned by RequestLoggingMiddleware, or "unknown"."""
    return getattr(request.state, "request_id", "unknown")
