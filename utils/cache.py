"""Best-effort Redis cache layer.

The cache is never authoritative: every failure (store down, timeout,
undecodable or outdated entry) is logged and reported as a miss, so callers
always fall back to the source of truth.
"""

import asyncio
import functools
import json
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from config import settings
from database.redis_store import MemoryStore, RedisStore
from services.exceptions import CacheUnavailableError, StoreUnavailableError
from utils.cache_keys import CacheKeys
from utils.deadline import with_timeout
from utils.logger import cache_logger as logger

T = TypeVar("T")


class CacheManager:
    """Async cache manager over a RedisStore / MemoryStore."""

    def __init__(
        self,
        store=None,
        schema_version: int = settings.CACHE_SCHEMA_VERSION,
        op_timeout: float = settings.CACHE_OP_TIMEOUT,
    ):
        self._store = store
        self._enabled = store is not None
        self.schema_version = schema_version
        self.op_timeout = op_timeout

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def store(self):
        return self._store

    async def connect(self, store=None):
        """Connect to Redis (or the in-memory store when Redis is disabled)."""
        if store is None:
            store = RedisStore.from_url(settings.REDIS_URL) if settings.REDIS_ENABLED else MemoryStore()
        try:
            await store.ping()
            self._store = store
            self._enabled = True
            logger.info("Cache connected", store=type(store).__name__)
        except StoreUnavailableError as exc:
            logger.warning("Cache store unavailable, caching disabled", error=str(exc))
            self._store = None
            self._enabled = False

    async def disconnect(self):
        if self._store is not None:
            await self._store.close()
            logger.info("Cache disconnected")

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await with_timeout(awaitable, self.op_timeout)
        except asyncio.TimeoutError as exc:
            raise CacheUnavailableError(f"{operation} timed out") from exc
        except StoreUnavailableError as exc:
            raise CacheUnavailableError(f"{operation} failed: {exc.message}") from exc
        except Exception as exc:
            raise CacheUnavailableError(f"{operation} failed: {exc}") from exc

    def _wrap(self, value: Any) -> str:
        return json.dumps({"v": self.schema_version, "data": value}, default=str)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache; None on miss, outdated entry or failure."""
        if not self._enabled:
            return None

        try:
            raw = await self._call("get", self._store.get(key))
        except CacheUnavailableError as exc:
            logger.error("Cache get failed", key=key, error=str(exc))
            return None

        if raw is None:
            logger.debug("Cache miss", key=key)
            return None

        try:
            envelope = json.loads(raw)
        except ValueError:
            envelope = None
        if not isinstance(envelope, dict) or envelope.get("v") != self.schema_version:
            logger.info("Cache entry outdated, evicting", key=key)
            await self.delete(key)
            return None

        logger.debug("Cache hit", key=key)
        return envelope.get("data")

    async def set(self, key: str, value: Any, ttl: int = CacheKeys.TTL_PRODUCT) -> bool:
        """Set value in cache with TTL."""
        if not self._enabled:
            return False

        try:
            await self._call("set", self._store.set(key, self._wrap(value), ttl))
            logger.debug("Cache set", key=key, ttl=ttl)
            return True
        except CacheUnavailableError as exc:
            logger.error("Cache set failed", key=key, error=str(exc))
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        if not self._enabled:
            return False

        try:
            await self._call("delete", self._store.delete(key))
            logger.debug("Cache delete", key=key)
            return True
        except CacheUnavailableError as exc:
            logger.error("Cache delete failed", key=key, error=str(exc))
            return False

    async def keys_matching_prefix(self, prefix: str) -> List[str]:
        if not self._enabled:
            return []

        try:
            return await self._call("scan", self._store.scan_prefix(prefix))
        except CacheUnavailableError as exc:
            logger.error("Cache scan failed", prefix=prefix, error=str(exc))
            return []

    async def delete_prefix(self, prefix: str) -> int:
        """Delete all keys under `prefix`. Scan-then-delete, not atomic."""
        if not self._enabled:
            return 0

        try:
            keys = await self._call("scan", self._store.scan_prefix(prefix))
            if not keys:
                return 0
            deleted = await self._call("delete", self._store.delete(*keys))
            logger.info("Cache prefix deleted", prefix=prefix, count=deleted)
            return deleted
        except CacheUnavailableError as exc:
            logger.error("Cache prefix delete failed", prefix=prefix, error=str(exc))
            return 0

    async def get_counter(self, key: str) -> Optional[int]:
        """Read an integer counter; 0 when absent, None when the cache is unavailable."""
        if not self._enabled:
            return None

        try:
            raw = await self._call("get", self._store.get(key))
        except CacheUnavailableError as exc:
            logger.error("Cache counter read failed", key=key, error=str(exc))
            return None
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            return None

    async def incr(self, key: str) -> Optional[int]:
        if not self._enabled:
            return None

        try:
            return await self._call("incr", self._store.incr(key))
        except CacheUnavailableError as exc:
            logger.error("Cache incr failed", key=key, error=str(exc))
            return None

    async def clear(self) -> bool:
        """Clear all cache."""
        if not self._enabled:
            return False

        try:
            await self._call("flush", self._store.flush())
            logger.warning("Cache cleared (all keys deleted)")
            return True
        except CacheUnavailableError as exc:
            logger.error("Cache clear failed", error=str(exc))
            return False


@functools.lru_cache(maxsize=None)
def _adapter(snapshot_type) -> TypeAdapter:
    return TypeAdapter(snapshot_type)


class CacheNamespace:
    """
    Cache-aside helper bound to one entity namespace.

    Values go through an explicit snapshot type both ways, so a cached entry
    that no longer matches the current schema is dropped instead of returned.

    Invalidation strategies:
        prefix      delete every key under `{entity}:` (scan-then-delete)
        generation  bump `{entity}:__generation__`; keys embed the generation
                    so older entries become unreachable and expire by TTL
    """

    def __init__(
        self,
        cache: CacheManager,
        entity: str,
        ttl: int,
        strategy: Optional[str] = None,
    ):
        self.cache = cache
        self.entity = entity
        self.ttl = ttl
        self.strategy = strategy or settings.CACHE_INVALIDATION

    async def _physical_key(self, key: str) -> Optional[str]:
        if self.strategy != "generation":
            return key
        generation = await self.cache.get_counter(CacheKeys.generation(self.entity))
        if generation is None:
            return None
        suffix = key[len(self.entity) + 1:] if key.startswith(f"{self.entity}:") else key
        return f"{self.entity}:g{generation}:{suffix}"

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        snapshot_type: Any,
        ttl: Optional[int] = None,
    ) -> T:
        """Return the cached value for `key`, or load, cache and return it."""
        adapter = _adapter(snapshot_type)
        physical = await self._physical_key(key)

        if physical is not None:
            cached = await self.cache.get(physical)
            if cached is not None:
                try:
                    value = adapter.validate_python(cached)
                    logger.debug("Cache hit", key=physical)
                    return value
                except ValidationError:
                    logger.warning("Cached snapshot does not validate, evicting", key=physical)
                    await self.cache.delete(physical)

        value = await loader()

        if physical is not None:
            await self.cache.set(physical, adapter.dump_python(value, mode="json"), ttl or self.ttl)
        return value

    async def invalidate(self) -> int:
        """Make every cached result of this entity unobservable."""
        if self.strategy == "generation":
            generation = await self.cache.incr(CacheKeys.generation(self.entity))
            logger.info(f"{self.entity.capitalize()} cache invalidated", generation=generation)
            return 1 if generation is not None else 0
        deleted = await self.cache.delete_prefix(CacheKeys.invalidate_pattern(self.entity))
        logger.info(f"{self.entity.capitalize()} cache invalidated", deleted=deleted)
        return deleted
