# src/distributed_cache/dependencies/cache.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Dependency wiring for cache namespaces.

Purpose:
    Build a ready-to-use :class:`DistributedSystemsCache` from raw options.
    Production callers get the shared Redis client and Prometheus metrics;
    tests pass a fake store (e.g. ``RedisJsonStore(fakeredis_client)``).

Layer:
    dependencies
"""

from __future__ import annotations

from typing import Any

from distributed_cache.application.interfaces.cache_metrics_port import CacheMetricsPort
from distributed_cache.application.interfaces.json_store_port import JsonStorePort
from distributed_cache.application.services.distributed_cache import DistributedSystemsCache
from distributed_cache.config.cache import CacheConfiguration
from distributed_cache.infrastructure.caching.json_store import RedisJsonStore
from distributed_cache.infrastructure.observability.cache_metrics import PrometheusCacheMetrics

__all__ = ["create_distributed_cache"]


def create_distributed_cache(
    *,
    store: JsonStorePort | None = None,
    metrics: CacheMetricsPort | None = None,
    **options: Any,
) -> DistributedSystemsCache:
    """Validate ``options`` and return a cache bound to ``store``.

    Args:
        store: Backing store; defaults to :class:`RedisJsonStore` on the shared
            Redis client.
        metrics: Outcome counters; defaults to Prometheus.
        **options: Keyword options accepted by :meth:`CacheConfiguration.build`.

    Returns:
        DistributedSystemsCache: Cache for the configured namespace.

    Raises:
        ConfigurationError: If the options are invalid.
    """
    config = CacheConfiguration.build(**options)
    return DistributedSystemsCache(
        config,
        store if store is not None else RedisJsonStore(),
        metrics=metrics if metrics is not None else PrometheusCacheMetrics(),
    )
