"""Rate limiting middleware using SlowAPI."""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from config import settings


def get_owner_or_ip(request: Request) -> str:
    """
    Get the rate limit key.

    Priority:
    1. user_id query param (registered user)
    2. guest_id query param (guest session)
    3. IP address
    """
    user_id = request.query_params.get("user_id")
    if user_id:
        return f"user:{user_id}"

    guest_id = request.query_params.get("guest_id")
    if guest_id:
        return f"guest:{guest_id}"

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_owner_or_ip,
    default_limits=["200/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    headers_enabled=True,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom error handler for rate limit exceeded.

    Returns the common error shape instead of plain text.
    """
    headers = exc.headers or {}
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "RateLimitExceeded",
            "message": "Too many requests. Please try again later.",
            "details": {
                "limit": str(exc.detail),
                "retry_after": headers.get("Retry-After"),
            },
        },
        headers=exc.headers,
    )


def setup_rate_limiting(app):
    """
    Setup rate limiting for FastAPI app.

    Usage:
        from middlewares.rate_limit import setup_rate_limiting

        app = FastAPI()
        setup_rate_limiting(app)
    """
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
