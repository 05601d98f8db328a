"""Service-layer error taxonomy."""

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error = "ServiceError"
    retryable = False

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    status_code = 404
    error = "NotFound"


class ConflictError(ServiceError):
    status_code = 409
    error = "Conflict"


class ValidationFailedError(ServiceError):
    status_code = 400
    error = "ValidationError"


class InsufficientStockError(ValidationFailedError):
    """Requested quantity exceeds stock."""

    error = "InsufficientStock"

    def __init__(self, product_id: int, available: int, requested: int, in_cart: int = 0):
        message = f"Insufficient stock. Available: {available}, Requested: {requested}"
        if in_cart:
            message += f", In cart: {in_cart}"
        super().__init__(
            message,
            details={
                "product_id": product_id,
                "available": available,
                "requested": requested,
                "in_cart": in_cart,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested
        self.in_cart = in_cart


class AuthenticationError(ServiceError):
    status_code = 401
    error = "Unauthorized"


class StoreUnavailableError(ServiceError):
    """Persistent store (SQL or guest KV store) failed; safe to retry."""

    status_code = 503
    error = "StoreUnavailable"
    retryable = True


class StoreTimeoutError(StoreUnavailableError):
    error = "StoreTimeout"


class CacheUnavailableError(Exception):
    """Cache store unreachable. Absorbed by the cache adapter, never surfaced."""
