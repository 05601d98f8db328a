"""Rate limit configuration for different endpoints."""

from typing import Dict


class RateLimitConfig:
    """
    Rate limit configurations for API endpoints.

    Format: "requests/period"
    Periods: second, minute, hour, day
    """

    # Public endpoints
    HEALTH = "60/minute"
    CATALOG_READ = "120/minute"
    GUEST_SESSION = "10/minute"  # New guest ids

    # Cart / wishlist (guest and user)
    CART_GET = "60/minute"
    CART_WRITE = "30/minute"
    WISHLIST_GET = "60/minute"
    WISHLIST_WRITE = "30/minute"

    # Accounts
    LOGIN = "10/minute"  # Password guessing
    REGISTER = "5/minute"

    # Admin endpoints
    ADMIN_WRITE = "60/minute"

    @classmethod
    def get_limit(cls, endpoint: str, is_admin: bool = False) -> str:
        """
        Get rate limit for endpoint.

        Args:
            endpoint: Endpoint name
            is_admin: Whether user is admin

        Returns:
            Rate limit string
        """
        base_limit = getattr(cls, endpoint.upper(), "30/minute")

        if is_admin:
            # Admins get 3x limits
            count, period = base_limit.split("/")
            return f"{int(count) * 3}/{period}"

        return base_limit

    @classmethod
    def get_all_limits(cls) -> Dict[str, str]:
        """Get all configured limits as dict."""
        return {
            key: value
            for key, value in cls.__dict__.items()
            if not key.startswith("_") and isinstance(value, str) and "/" in value
        }
