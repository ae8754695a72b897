"""
Distributed cache: cache-aside reads over Redis with stale-while-revalidate.

Typical usage:
    from distributed_cache import connect, create_distributed_cache

    connect()
    users = create_distributed_cache(
        cache_key_prefix="Users:",
        cache_max_age_ms="1h",
        cache_populator=refresh_user,
    )
    user = await users.get_cache("42")
"""

from __future__ import annotations

from distributed_cache.application.services.distributed_cache import DistributedSystemsCache
from distributed_cache.config.cache import CacheConfiguration
from distributed_cache.dependencies.cache import create_distributed_cache
from distributed_cache.domain.exceptions.cache import (
    CachePopulationTimeoutError,
    ConfigurationError,
)
from distributed_cache.infrastructure.caching.redis_client import (
    close_redis as disconnect,
    get_redis_client as get_client,
    init_redis as connect,
)

__all__ = [
    "CacheConfiguration",
    "CachePopulationTimeoutError",
    "ConfigurationError",
    "DistributedSystemsCache",
    "connect",
    "create_distributed_cache",
    "disconnect",
    "get_client",
]
