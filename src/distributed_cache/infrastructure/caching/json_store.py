# src/distributed_cache/infrastructure/caching/json_store.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""JSON Store (Redis-backed).

Synopsis:
    Implements the application :class:`JsonStorePort` on top of an async
    Redis client. Keys arrive already namespaced by the cache; this adapter
    only serializes, issues commands, and records store metrics.

Design:
    * Pure JSON (utf-8) serialization; no pickle.
    * No TTL: record age is judged from the ``updatedAt`` stamp instead.
    * Key listing walks ``SCAN MATCH`` rather than ``KEYS`` so large
      keyspaces do not block the server.
    * With no client injected, the shared client from
      :func:`get_redis_client` is resolved on every call.

Layer:
    infrastructure/caching

See Also:
    - distributed_cache.infrastructure.caching.redis_client
    - distributed_cache.application.interfaces.json_store_port.JsonStorePort
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from typing import Any

from distributed_cache.application.interfaces.json_store_port import JsonStorePort
from distributed_cache.infrastructure.caching.redis_client import RedisClient, get_redis_client
from distributed_cache.infrastructure.observability.metrics import (
    get_store_operation_duration_seconds,
    get_store_operations_total,
)

__all__ = ["RedisJsonStore"]

logger = logging.getLogger(__name__)


class RedisJsonStore(JsonStorePort):
    """Redis-backed implementation of the JsonStorePort Protocol."""

    def __init__(self, client: RedisClient | None = None, *, scan_count: int = 500) -> None:
        """Initialize the store adapter.

        Args:
            client: Explicit Redis handle; the shared client when ``None``.
            scan_count: ``COUNT`` hint passed to each ``SCAN`` step.
        """
        self._client = client
        self._scan_count = scan_count

    @property
    def client(self) -> RedisClient:
        """The Redis handle used for the next command."""
        return self._client if self._client is not None else get_redis_client()

    @asynccontextmanager
    async def _observe(self, operation: str) -> AsyncIterator[dict[str, str]]:
        """Time one store call; the body may set ``outcome["hit"]``."""
        outcome = {"hit": "n/a"}
        start = time.perf_counter()
        try:
            yield outcome
        finally:
            duration = time.perf_counter() - start
            with suppress(Exception):
                get_store_operation_duration_seconds().labels(
                    operation=operation, hit=outcome["hit"]
                ).observe(duration)
                get_store_operations_total().labels(operation=operation, hit=outcome["hit"]).inc()

    async def get_json(self, key: str) -> Any | None:
        """Return the JSON value at ``key``, or ``None`` when absent or undecodable."""
        async with self._observe("get_json") as outcome:
            outcome["hit"] = "false"
            raw = await self.client.get(key)
            if raw is None:
                return None
            try:
                value = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("Ignoring undecodable cache value", extra={"storage_key": key})
                return None
            outcome["hit"] = "true"
            return value

    async def set_json(self, key: str, value: Any) -> None:
        """Store ``value`` at ``key`` as compact JSON."""
        async with self._observe("set_json"):
            await self.client.set(key, json.dumps(value, separators=(",", ":")))

    async def delete(self, key: str) -> bool:
        """Delete ``key``; True if it existed."""
        async with self._observe("delete") as outcome:
            removed = int(await self.client.delete(key))
            outcome["hit"] = "true" if removed else "false"
            return removed > 0

    async def keys(self, pattern: str) -> list[str]:
        """Return every key matching the glob ``pattern`` (order unspecified)."""
        async with self._observe("keys"):
            found: list[str] = []
            async for key in self.client.scan_iter(match=pattern, count=self._scan_count):
                found.append(key.decode("utf-8") if isinstance(key, bytes) else key)
            # SCAN may yield a key more than once.
            return list(dict.fromkeys(found))
