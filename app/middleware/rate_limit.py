"""Rate limiting using slowapi for abuse prevention."""

import json

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address


def get_client_ip(request: Request) -> str:
    """
    Get the client IP address from the request.

    X-Forwarded-For is only honored when the direct peer is one of the
    configured TRUSTED_PROXIES, to prevent IP spoofing.
    """
    from app.config import get_settings

    direct_ip: str = get_remote_address(request)

    settings = get_settings()
    trusted_proxy_list = [
        ip.strip() for ip in settings.trusted_proxies.split(",")
        if ip.strip()
    ]
    if direct_ip not in trusted_proxy_list:
        return direct_ip

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return direct_ip


# In-memory storage; each worker process keeps its own counters
limiter = Limiter(key_func=get_client_ip, default_limits=["200/minute"])


RATE_LIMITS = {
    "generate": "20/minute",     # POST /api/generate - parses a whole workbook
    "image_proxy": "60/minute",  # GET /api/image-proxy-base64 - outbound fetch
}


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    """
    Return 429 Too Many Requests with Retry-After and X-RateLimit-* headers.
    """
    retry_after = getattr(exc, "retry_after", 60)

    error_body = {
        "error": "Rate limit exceeded",
        "message": f"Too many requests. Please retry after {retry_after} seconds.",
        "retry_after": retry_after,
    }

    response = Response(
        content=json.dumps(error_body),
        status_code=429,
        media_type="application/json",
    )
    response.headers["Retry-After"] = str(retry_after)
    response.headers["X-RateLimit-Remaining"] = "0"

    if isinstance(exc, RateLimitExceeded) and exc.detail:
        response.headers["X-RateLimit-Limit"] = exc.detail

    return response


def get_limiter() -> Limiter:
    """Module-level limiter used by route decorators and the app state."""
    return limiter
