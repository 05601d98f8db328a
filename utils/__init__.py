"""Shared infrastructure: cache adapter, cache keys, request deadline, logging."""

from utils.cache import CacheManager, CacheNamespace
from utils.cache_keys import CacheKeys
from utils.logger import api_logger, cache_logger, db_logger, get_correlation_id, logger

__all__ = [
    "CacheManager",
    "CacheNamespace",
    "CacheKeys",
    "logger",
    "api_logger",
    "db_logger",
    "cache_logger",
    "get_correlation_id",
]
