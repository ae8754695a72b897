# tests/unit/infrastructure/caching/test_redis_json_store.py
from __future__ import annotations

import json

import fakeredis.aioredis
import prometheus_client as prom
import pytest

from distributed_cache.infrastructure.caching import redis_client as redis_client_module
from distributed_cache.infrastructure.caching.json_store import RedisJsonStore


def _ops(operation: str, hit: str) -> float:
    value = prom.REGISTRY.get_sample_value(
        "cache_store_operations_total", {"operation": operation, "hit": hit}
    )
    return value or 0.0


@pytest.mark.asyncio
async def test_set_and_get_json_round_trip(
    store: RedisJsonStore, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    await store.set_json("ns:k", {"a": [1, 2], "b": None})

    assert await fake_redis.get("ns:k") == '{"a":[1,2],"b":null}'
    assert await store.get_json("ns:k") == {"a": [1, 2], "b": None}


@pytest.mark.asyncio
async def test_get_json_missing_returns_none(store: RedisJsonStore) -> None:
    assert await store.get_json("ns:absent") is None


@pytest.mark.asyncio
async def test_get_json_passes_through_non_object_values(
    store: RedisJsonStore, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    await fake_redis.set("ns:list", json.dumps([1, 2, 3]))

    assert await store.get_json("ns:list") == [1, 2, 3]


@pytest.mark.asyncio
async def test_delete_reports_existence(store: RedisJsonStore) -> None:
    await store.set_json("ns:k", {})

    assert await store.delete("ns:k") is True
    assert await store.delete("ns:k") is False


@pytest.mark.asyncio
async def test_keys_scans_by_glob(
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> None:
    store = RedisJsonStore(fake_redis, scan_count=2)
    for i in range(7):
        await store.set_json(f"ns:{i}", {"i": i})
    await store.set_json("other:1", {})

    keys = await store.keys("ns:*")

    assert sorted(keys) == [f"ns:{i}" for i in range(7)]


@pytest.mark.asyncio
async def test_operations_are_counted(store: RedisJsonStore) -> None:
    before_miss = _ops("get_json", "false")
    before_hit = _ops("get_json", "true")
    before_set = _ops("set_json", "n/a")

    await store.get_json("ns:k")
    await store.set_json("ns:k", {"v": 1})
    await store.get_json("ns:k")

    assert _ops("get_json", "false") == before_miss + 1
    assert _ops("get_json", "true") == before_hit + 1
    assert _ops("set_json", "n/a") == before_set + 1


@pytest.mark.asyncio
async def test_store_without_client_uses_shared_client(
    monkeypatch: pytest.MonkeyPatch, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    monkeypatch.setattr(redis_client_module, "_client", fake_redis)
    store = RedisJsonStore()

    await store.set_json("shared:k", {"v": 1})

    assert store.client is fake_redis
    assert json.loads(await fake_redis.get("shared:k")) == {"v": 1}


@pytest.mark.asyncio
async def test_get_json_undecodable_value_reads_as_absent(
    store: RedisJsonStore,
    fake_redis: fakeredis.aioredis.FakeRedis,
    caplog: pytest.LogCaptureFixture,
) -> None:
    await fake_redis.set("ns:bad", "not-json{")

    with caplog.at_level("WARNING"):
        assert await store.get_json("ns:bad") is None

    warning = next(
        r for r in caplog.records if r.getMessage() == "Ignoring undecodable cache value"
    )
    assert getattr(warning, "storage_key") == "ns:bad"
