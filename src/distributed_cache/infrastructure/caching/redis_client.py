# src/distributed_cache/infrastructure/caching/redis_client.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Shared async Redis client.

Design notes:
    * Provides a small Protocol (`RedisClient`) covering the commands the
      cache store issues.
    * Uses redis.asyncio under the hood for the concrete implementation.
    * Is **loop-aware**: if called from a different event loop than the one
      that created the client, a new client bound to the current loop is
      created instead of reusing a connection across loops.
    * Test suites may inject a fakeredis client by assigning to the module-level
      `_client`; when that happens it is never overwritten or closed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, cast, runtime_checkable

import redis.asyncio as aioredis

if TYPE_CHECKING:
    from redis.asyncio.client import Redis as _RedisGeneric

    AioredisRedis: TypeAlias = _RedisGeneric[str]
else:
    from redis.asyncio.client import Redis as AioredisRedis  # type: ignore[assignment]

from distributed_cache.config.settings import Settings, get_settings

__all__ = [
    "RedisClient",
    "init_redis",
    "close_redis",
    "get_redis_client",
    "redis_dependency",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class RedisClient(Protocol):
    """Protocol for the subset of Redis commands used by the cache."""

    async def get(self, key: str) -> Any: ...
    async def set(self, key: str, value: Any) -> Any: ...
    async def delete(self, *keys: str) -> Any: ...
    def scan_iter(
        self, match: str | None = None, count: int | None = None
    ) -> AsyncIterator[Any]: ...
    async def ping(self) -> Any: ...
    async def aclose(self) -> Any: ...


# The loop that created the client is tracked so a connection is never reused
# across event loops.
_client: RedisClient | Any | None = None
_client_loop_id: int | None = None

_DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _current_loop_id() -> int | None:
    """Return the id() of the current running event loop, or None if absent."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return None
    return id(loop)


def _create_aioredis_client(url: str, settings: Settings) -> AioredisRedis:
    """Build the concrete asyncio Redis client from URL and settings.

    Args:
        url: Redis URL.
        settings: Process settings (timeouts, health checks).

    Returns:
        AioredisRedis: Configured Redis client decoding responses as UTF-8.
    """
    _from_url: Any = aioredis.from_url
    client = _from_url(
        url=url,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=settings.redis_health_check_interval_s,
        socket_timeout=settings.redis_socket_timeout_s,
        socket_connect_timeout=settings.redis_socket_connect_timeout_s,
    )
    return cast(AioredisRedis, client)


def _is_fake_client(client: Any | None) -> bool:
    """Return True if the given client looks like a fakeredis instance."""
    if client is None:
        return False
    return type(client).__module__.startswith("fakeredis")


def init_redis(settings: Settings | None = None) -> None:
    """Initialize the shared async Redis client for the **current** event loop.

    Idempotent per loop. A test-injected fakeredis client is left in place.

    Args:
        settings: Process settings; defaults to :func:`get_settings`.
    """
    global _client, _client_loop_id

    if _is_fake_client(_client):
        return

    loop_id = _current_loop_id()
    if _client is not None and _client_loop_id == loop_id:
        return

    settings = settings or get_settings()
    url = str(settings.redis_url or _DEFAULT_REDIS_URL)

    # A client from another loop is dropped, not closed: closing it here
    # raises "Event loop is closed".
    _client = cast(RedisClient, _create_aioredis_client(url, settings))
    _client_loop_id = loop_id
    logger.info("Redis client initialized", extra={"redis_loop_bound": loop_id is not None})


async def close_redis() -> None:
    """Close the shared Redis client (best-effort)."""
    global _client, _client_loop_id

    if _client is not None and not _is_fake_client(_client):
        loop_id = _current_loop_id()
        if _client_loop_id is None or loop_id == _client_loop_id:
            with suppress(RuntimeError, ConnectionError):
                await _client.aclose()

    _client = None
    _client_loop_id = None


def get_redis_client() -> RedisClient:
    """Return the shared Redis client (loop-aware, lazily initialized).

    Returns:
        RedisClient: Shared client instance.

    Raises:
        RuntimeError: If the client could not be initialized.
    """
    if _is_fake_client(_client):
        return cast(RedisClient, _client)

    loop_id = _current_loop_id()
    if _client is None or (
        _client_loop_id is not None and loop_id is not None and loop_id != _client_loop_id
    ):
        init_redis(get_settings())

    if _client is None:
        raise RuntimeError("Redis client not initialized (init_redis failed)")

    return cast(RedisClient, _client)


@asynccontextmanager
async def redis_dependency() -> AsyncGenerator[RedisClient, None]:
    """Yield the shared Redis client for DI.

    Yields:
        RedisClient: Shared client instance.
    """
    yield get_redis_client()
