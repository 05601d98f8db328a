"""Key-value store adapters shared by the cache and the guest session store."""

import math
import re
import time
from typing import Callable, Dict, List, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from services.exceptions import StoreUnavailableError

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so a prefix matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class RedisStore:
    """Async Redis adapter. Redis errors surface as StoreUnavailableError."""

    def __init__(self, client: redis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 5.0) -> "RedisStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        return cls(client)

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError("Redis ping failed", details=str(exc)) from exc

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(key)
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis GET {key} failed", details=str(exc)) from exc

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            if ttl:
                await self._redis.set(key, value, ex=ttl)
            else:
                await self._redis.set(key, value)
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis SET {key} failed", details=str(exc)) from exc

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(await self._redis.delete(*keys))
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError("Redis DEL failed", details=str(exc)) from exc

    async def scan_prefix(self, prefix: str) -> List[str]:
        """Return every key starting with `prefix` (SCAN, never KEYS)."""
        try:
            return [
                key
                async for key in self._redis.scan_iter(match=f"{escape_glob(prefix)}*", count=500)
            ]
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis SCAN {prefix}* failed", details=str(exc)) from exc

    async def incr(self, key: str) -> int:
        try:
            return int(await self._redis.incr(key))
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis INCR {key} failed", details=str(exc)) from exc

    async def ttl(self, key: str) -> int:
        try:
            return int(await self._redis.ttl(key))
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError(f"Redis TTL {key} failed", details=str(exc)) from exc

    async def flush(self) -> None:
        try:
            await self._redis.flushdb()
        except (RedisError, OSError) as exc:
            raise StoreUnavailableError("Redis FLUSHDB failed", details=str(exc)) from exc

    async def close(self) -> None:
        await self._redis.aclose()


class MemoryStore:
    """
    In-process store with Redis-like TTL semantics.

    Used when Redis is disabled (development) and in tests. Not shared
    between processes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def _alive(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        entry = self._alive(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (value, expires_at)

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if self._alive(key) is not None:
                del self._data[key]
                deleted += 1
        return deleted

    async def scan_prefix(self, prefix: str) -> List[str]:
        return [key for key in list(self._data) if key.startswith(prefix) and self._alive(key)]

    async def incr(self, key: str) -> int:
        entry = self._alive(key)
        value, expires_at = entry if entry else ("0", None)
        new_value = int(value) + 1
        self._data[key] = (str(new_value), expires_at)
        return new_value

    async def ttl(self, key: str) -> int:
        entry = self._alive(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return math.ceil(entry[1] - self._clock())

    async def flush(self) -> None:
        self._data.clear()

    async def close(self) -> None:
        pass
