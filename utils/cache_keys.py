"""Cache key patterns for different entities."""

import json
from typing import Any, Mapping, Optional

from config import settings


class CacheKeys:
    """Cache key patterns and TTLs."""

    # Entity namespaces
    GENDER = "gender"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    PRODUCT = "product"
    OFFER = "offer"

    # Guest session records (not part of any catalog namespace)
    GUEST_CART = "guest:cart"
    GUEST_WISHLIST = "guest:wishlist"

    GENERATION_SUFFIX = "__generation__"

    # TTLs (in seconds)
    TTL_TAXONOMY = settings.CACHE_TTL_TAXONOMY
    TTL_PRODUCT = settings.CACHE_TTL_PRODUCT
    TTL_FEATURED = settings.CACHE_TTL_FEATURED
    TTL_OFFER = settings.CACHE_TTL_OFFER
    TTL_GUEST = settings.GUEST_TTL

    # Reserved in key segments; percent first so escaping stays reversible
    _ESCAPES = (("%", "%25"), (":", "%3A"), ("|", "%7C"), (",", "%2C"))

    @staticmethod
    def canonical_value(value: Any) -> str:
        """
        Render one filter value so that equal inputs give equal strings.

        Strings are JSON-quoted, so no string can read as an unset filter
        (`all`), a boolean, a number or a list. Lists are bracketed.
        """
        if value is None:
            return "all"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return "[" + ",".join(sorted(CacheKeys.canonical_value(v) for v in value)) + "]"
        text = json.dumps(str(value), ensure_ascii=False)
        for char, escaped in CacheKeys._ESCAPES:
            text = text.replace(char, escaped)
        return text

    @staticmethod
    def canonical_filters(filters: Optional[Mapping[str, Any]]) -> str:
        """Encode every filter in fixed (sorted) order, e.g. `category_id=3|in_stock=true`."""
        if not filters:
            return "none"
        return "|".join(
            f"{name}={CacheKeys.canonical_value(filters[name])}" for name in sorted(filters)
        )

    @staticmethod
    def query(entity: str, kind: str, page: int, limit: int, filters: Optional[Mapping[str, Any]] = None) -> str:
        """Key for a list query: `{entity}:{kind}:{page}:{limit}:{filters}`."""
        return f"{entity}:{kind}:{page}:{limit}:{CacheKeys.canonical_filters(filters)}"

    @staticmethod
    def by_id(entity: str, entity_id: Any) -> str:
        return f"{entity}:id:{entity_id}"

    @staticmethod
    def by_slug(entity: str, slug: str, scope: Optional[Any] = None) -> str:
        return f"{entity}:slug:{slug}:{CacheKeys.canonical_value(scope)}"

    @staticmethod
    def scoped(entity: str, kind: str, value: Any = None) -> str:
        """Key for a single-argument lookup, e.g. `product:featured:10`."""
        return f"{entity}:{kind}:{CacheKeys.canonical_value(value)}"

    @staticmethod
    def generation(entity: str) -> str:
        return f"{entity}:{CacheKeys.GENERATION_SUFFIX}"

    @staticmethod
    def invalidate_pattern(entity: str) -> str:
        """Prefix that covers every cached key of an entity."""
        return f"{entity}:"

    @staticmethod
    def guest_cart(guest_id: str) -> str:
        return f"{CacheKeys.GUEST_CART}:{guest_id}"

    @staticmethod
    def guest_wishlist(guest_id: str) -> str:
        return f"{CacheKeys.GUEST_WISHLIST}:{guest_id}"
