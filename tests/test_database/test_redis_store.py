"""Tests for the key-value store adapters."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from database.redis_store import MemoryStore, RedisStore, escape_glob
from services.exceptions import StoreUnavailableError


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def test_memory_store_expires_keys():
    clock = Clock()
    store = MemoryStore(clock=clock)

    await store.set("k", "v", ttl=10)
    clock.now = 9
    assert await store.get("k") == "v"
    assert await store.ttl("k") == 1

    clock.now = 10
    assert await store.get("k") is None
    assert await store.ttl("k") == -2


async def test_memory_store_set_rewrites_ttl():
    clock = Clock()
    store = MemoryStore(clock=clock)

    await store.set("k", "v1", ttl=10)
    clock.now = 8
    await store.set("k", "v2", ttl=10)
    clock.now = 15

    assert await store.get("k") == "v2"


async def test_memory_store_scan_and_delete():
    store = MemoryStore()
    await store.set("product:id:1", "a")
    await store.set("product:id:2", "b")
    await store.set("offer:id:1", "c")

    keys = await store.scan_prefix("product:")

    assert sorted(keys) == ["product:id:1", "product:id:2"]
    assert await store.delete(*keys) == 2
    assert await store.scan_prefix("product:") == []


async def test_memory_store_incr():
    store = MemoryStore()

    assert await store.incr("gen") == 1
    assert await store.incr("gen") == 2
    assert await store.get("gen") == "2"


def test_escape_glob():
    assert escape_glob("a*b?[c]") == r"a\*b\?\[c\]"


async def test_redis_store_set_with_ttl():
    client = AsyncMock()
    store = RedisStore(client)

    await store.set("k", "v", ttl=30)

    client.set.assert_awaited_once_with("k", "v", ex=30)


async def test_redis_store_wraps_errors():
    client = AsyncMock()
    client.get.side_effect = RedisConnectionError("refused")
    store = RedisStore(client)

    with pytest.raises(StoreUnavailableError):
        await store.get("k")


async def test_redis_store_scan_escapes_prefix():
    client = AsyncMock()
    seen = {}

    async def scan_iter(match, count):
        seen["match"] = match
        for key in ("p*:1", "p*:2"):
            yield key

    client.scan_iter = scan_iter
    store = RedisStore(client)

    assert await store.scan_prefix("p*:") == ["p*:1", "p*:2"]
    assert seen["match"] == r"p\*:*"
