from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

# One global budget per client address
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    headers_enabled=True,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the same envelope as every other error, with X-RateLimit-* headers."""
    response = JSONResponse(
        status_code=429,
        content={"success": False, "error": RATE_LIMIT_MESSAGE, "limit": str(exc.detail)},
    )
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)
