# src/distributed_cache/application/services/distributed_cache.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Distributed cache (population / staleness state machine).

Synopsis:
    Cache-aside reads in front of a shared key-value store. Each
    :meth:`DistributedSystemsCache.get_cache` call walks:

        FETCH -> HIT  -> FRESH     return the value
                      -> STALE     return the value, revalidate in background
              -> MISS -> RETRY     start the populator, wait grace time, FETCH
                      -> EXHAUSTED default value / None / timeout error

Design:
    * Retry state is a loop counter local to one call.
    * The populator is never awaited by the caller: it runs as a supervised
      background task and the loop only re-reads the store after each
      grace-time sleep. A populator that hangs costs at most
      ``max_tries * grace_time``.
    * No per-key mutual exclusion. Concurrent misses may each trigger the
      populator and concurrent stale hits may each revalidate; populators are
      expected to be idempotent.
    * Background failures go to the configured error sink, never to callers.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from collections.abc import Mapping
from typing import Any

from distributed_cache.application.interfaces.cache_metrics_port import (
    CacheMetricsPort,
    NullCacheMetrics,
    PopulationTrigger,
)
from distributed_cache.application.interfaces.json_store_port import JsonStorePort
from distributed_cache.application.services.background_tasks import BackgroundTaskSupervisor
from distributed_cache.application.services.record_store import CacheRecordStore
from distributed_cache.config.cache import CacheConfiguration
from distributed_cache.domain.exceptions.cache import CachePopulationTimeoutError
from distributed_cache.domain.services.staleness import is_stale

__all__ = ["DistributedSystemsCache"]

logger = logging.getLogger(__name__)


class DistributedSystemsCache:
    """Cache-aside facade for one namespace.

    Args:
        config: Validated namespace configuration.
        store: Backing JSON store handle.
        metrics: Optional outcome counters.
    """

    def __init__(
        self,
        config: CacheConfiguration,
        store: JsonStorePort,
        *,
        metrics: CacheMetricsPort | None = None,
    ) -> None:
        self.config = config
        self._records = CacheRecordStore(store, config)
        self._metrics: CacheMetricsPort = metrics or NullCacheMetrics()
        self._tasks = BackgroundTaskSupervisor(error_sink=config.error_sink)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    async def get_cache(self, key: str) -> Any:
        """Return the cached value for ``key``, populating it when missing.

        Returns:
            The stored payload merged with ``updatedAt``; the configured
            default value when population is exhausted; or ``None`` when
            delete-on-expire mode is active and no record exists.

        Raises:
            CachePopulationTimeoutError: Population exhausted with no default
                configured and delete-on-expire off.
        """
        cfg = self.config
        self._log("getCache called", cache_key=key)

        attempt = 0
        while True:
            record = await self._records.read(key)

            if record is not None:
                self._log("getCache hit", cache_key=key, updated_at=record.updated_at)
                if is_stale(record.updated_at, cfg.max_age_ms):
                    self._log(
                        "getCache age check too old", cache_key=key, updated_at=record.updated_at
                    )
                    self._metrics.record_lookup(cfg.key_prefix, "stale")
                    self._tasks.spawn(
                        self._revalidate(key), name=f"revalidate:{cfg.key_prefix}{key}"
                    )
                else:
                    self._metrics.record_lookup(cfg.key_prefix, "fresh")
                return record.to_stored()

            self._log("getCache null", cache_key=key, fetch_attempt=attempt)
            if attempt >= cfg.max_tries or cfg.delete_on_expire:
                return self._exhausted(key, attempt)

            attempt += 1
            self._log("getCache call to populate called", cache_key=key, fetch_attempt=attempt)
            self._tasks.spawn(self._populate(key, "miss"), name=f"populate:{cfg.key_prefix}{key}")
            await asyncio.sleep(cfg.grace_time_s)

    def _exhausted(self, key: str, attempts: int) -> Any:
        cfg = self.config
        if cfg.has_default:
            self._log("getCache returning default value", cache_key=key, fetch_attempt=attempts)
            self._metrics.record_lookup(cfg.key_prefix, "default")
            return copy.deepcopy(cfg.default_value)
        if cfg.delete_on_expire:
            self._log("getCache absent in delete mode", cache_key=key)
            self._metrics.record_lookup(cfg.key_prefix, "absent")
            return None

        self._metrics.record_lookup(cfg.key_prefix, "timeout")
        logger.warning(
            "rejecting: %s%s",
            cfg.key_prefix,
            key,
            extra={
                "cache_key": key,
                "fetch_attempt": attempts,
                "grace_time_ms": cfg.grace_time_ms,
            },
        )
        raise CachePopulationTimeoutError(key, grace_time_ms=cfg.grace_time_ms, attempts=attempts)

    async def _populate(self, key: str, trigger: PopulationTrigger) -> None:
        self._metrics.record_population(self.config.key_prefix, trigger)
        result = self.config.populator(key)
        if inspect.isawaitable(result):
            await result

    async def _revalidate(self, key: str) -> None:
        """Drop a stale record, then repopulate unless in delete-on-expire mode."""
        await self._records.delete(key)
        if self.config.delete_on_expire:
            return
        await self._populate(key, "stale")

    # ------------------------------------------------------------------ #
    # Writes / maintenance
    # ------------------------------------------------------------------ #
    async def set_cache(self, key: str, value: Mapping[str, Any]) -> None:
        """Write ``value`` for ``key`` (set filter applied, ``updatedAt`` stamped)."""
        record = await self._records.write(key, value)
        self._log("setCache", cache_key=key, updated_at=record.updated_at)

    async def get_all(self) -> list[str]:
        """Return every storage key in this namespace."""
        return await self._records.list_all()

    async def clear_cache_record(self, key: str) -> bool:
        """Delete the record for ``key``; True if one existed."""
        return await self._records.delete(key)

    async def clear_all_cache_records(self) -> int:
        """Delete every record in this namespace (best-effort, sequential)."""
        return await self._records.clear_all()

    # ------------------------------------------------------------------ #
    # Background work
    # ------------------------------------------------------------------ #
    @property
    def pending_background_tasks(self) -> int:
        """Populate/revalidate tasks still running."""
        return self._tasks.pending

    async def drain(self) -> None:
        """Wait for all background populate/revalidate tasks to finish."""
        await self._tasks.drain()

    def _log(self, msg: str, **fields: Any) -> None:
        if self.config.verbose_log:
            prefix = self.config.key_prefix
            logger.info("%s: %s", prefix, msg, extra={"cache_prefix": prefix, **fields})
