# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio

from distributed_cache.application.services.distributed_cache import DistributedSystemsCache
from distributed_cache.config.cache import CacheConfiguration
from distributed_cache.config.settings import get_settings
from distributed_cache.infrastructure.caching import redis_client as redis_client_module
from distributed_cache.infrastructure.caching.json_store import RedisJsonStore

#: Short grace time so retry loops finish quickly.
FAST_GRACE_MS = 10


@pytest.fixture(autouse=True)
def _isolate_shared_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Never let one test's shared Redis client or settings leak into another."""
    monkeypatch.setattr(redis_client_module, "_client", None)
    monkeypatch.setattr(redis_client_module, "_client_loop_id", None)
    get_settings.cache_clear()


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """In-memory Redis speaking the redis.asyncio API, private to one test."""
    return fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def store(fake_redis: fakeredis.aioredis.FakeRedis) -> RedisJsonStore:
    """JSON store bound explicitly to the fake Redis."""
    return RedisJsonStore(fake_redis)


@pytest_asyncio.fixture
async def make_cache(
    store: RedisJsonStore,
) -> AsyncIterator[Callable[..., DistributedSystemsCache]]:
    """Factory building caches on the fake store.

    Background tasks are drained on teardown and must not leak.
    """
    created: list[DistributedSystemsCache] = []

    def _make(*, store_override: Any = None, **options: Any) -> DistributedSystemsCache:
        options.setdefault("cache_populator_ms_grace_time", FAST_GRACE_MS)
        cache = DistributedSystemsCache(
            CacheConfiguration.build(**options),
            store_override if store_override is not None else store,
        )
        created.append(cache)
        return cache

    yield _make

    for cache in created:
        await cache.drain()
        assert cache.pending_background_tasks == 0
