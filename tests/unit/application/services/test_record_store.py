# tests/unit/application/services/test_record_store.py
from __future__ import annotations

import json

import fakeredis.aioredis
import pytest

from distributed_cache.application.services.record_store import CacheRecordStore
from distributed_cache.config.cache import CacheConfiguration
from distributed_cache.domain.services.staleness import epoch_ms
from distributed_cache.infrastructure.caching.json_store import RedisJsonStore


def _records(store: RedisJsonStore, **options: object) -> CacheRecordStore:
    return CacheRecordStore(store, CacheConfiguration.build(cache_key_prefix="Users:", **options))


@pytest.mark.asyncio
async def test_write_stamps_and_stores_under_sanitized_key(
    store: RedisJsonStore, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    records = _records(store)
    before = epoch_ms()

    await records.write("ada@example.com", {"name": "Ada"})

    stored = json.loads(await fake_redis.get("Users:ada_example.com"))
    assert stored["name"] == "Ada"
    assert before <= stored["updatedAt"] <= epoch_ms()


@pytest.mark.asyncio
async def test_write_does_not_mutate_caller_value(store: RedisJsonStore) -> None:
    records = _records(store, cache_set_filter=lambda v: {**v, "filtered": True})
    value = {"name": "Ada"}

    await records.write("1", value)

    assert value == {"name": "Ada"}
    record = await records.read("1")
    assert record is not None
    assert record.payload == {"name": "Ada", "filtered": True}


@pytest.mark.asyncio
async def test_write_rejects_filter_returning_non_mapping(store: RedisJsonStore) -> None:
    records = _records(store, cache_set_filter=lambda v: ["not", "a", "mapping"])
    with pytest.raises(TypeError):
        await records.write("1", {"name": "Ada"})


@pytest.mark.asyncio
async def test_read_absent_and_non_conforming(
    store: RedisJsonStore, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    records = _records(store)
    assert await records.read("missing") is None

    await fake_redis.set("Users:legacy", json.dumps({"name": "written elsewhere"}))
    assert await records.read("legacy") is None


@pytest.mark.asyncio
async def test_delete_reports_existence(store: RedisJsonStore) -> None:
    records = _records(store)
    await records.write("1", {"a": 1})

    assert await records.delete("1") is True
    assert await records.delete("1") is False


@pytest.mark.asyncio
async def test_list_and_clear_all_stay_inside_namespace(
    store: RedisJsonStore, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    records = _records(store)
    for key in ("1", "2", "3"):
        await records.write(key, {"k": key})
    await fake_redis.set("Other:1", "{}")

    assert sorted(await records.list_all()) == ["Users:1", "Users:2", "Users:3"]
    assert await records.clear_all() == 3
    assert await records.list_all() == []
    assert await fake_redis.get("Other:1") == "{}"


class _FlakyStore(RedisJsonStore):
    """Fails to delete one specific key."""

    def __init__(self, client: fakeredis.aioredis.FakeRedis, poisoned: str) -> None:
        super().__init__(client)
        self.poisoned = poisoned

    async def delete(self, key: str) -> bool:
        if key == self.poisoned:
            raise ConnectionError("connection reset")
        return await super().delete(key)


@pytest.mark.asyncio
async def test_clear_all_is_best_effort(fake_redis: fakeredis.aioredis.FakeRedis) -> None:
    records = _records(_FlakyStore(fake_redis, poisoned="Users:2"))
    for key in ("1", "2", "3"):
        await records.write(key, {"k": key})

    assert await records.clear_all() == 2
    assert await records.list_all() == ["Users:2"]
