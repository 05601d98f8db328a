"""Middlewares for FastAPI application."""

from middlewares.error_handlers import setup_error_handlers
from middlewares.rate_limit import limiter, setup_rate_limiting
from middlewares.rate_limit_config import RateLimitConfig
from middlewares.logging_middleware import setup_logging

__all__ = [
    "limiter",
    "setup_error_handlers",
    "setup_rate_limiting",
    "RateLimitConfig",
    "setup_logging",
]
