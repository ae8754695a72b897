# src/distributed_cache/application/services/record_store.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cache record store.

Synopsis:
    Thin record-level operations over a :class:`JsonStorePort`. Every
    single-record call maps the logical key through the namespace's key codec;
    enumeration matches the raw prefix instead. Writes stamp ``updatedAt`` and
    apply the configured set filter; reads drop anything that is not a
    conforming record.

Layer:
    application/services
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from distributed_cache.application.interfaces.json_store_port import JsonStorePort
from distributed_cache.config.cache import CacheConfiguration
from distributed_cache.domain.entities.cache_record import CacheRecord
from distributed_cache.domain.services.key_codec import prefix_match_pattern
from distributed_cache.domain.services.staleness import epoch_ms

__all__ = ["CacheRecordStore"]

logger = logging.getLogger(__name__)


class CacheRecordStore:
    """Reads and writes :class:`CacheRecord` values for one namespace."""

    def __init__(self, store: JsonStorePort, config: CacheConfiguration) -> None:
        self._store = store
        self._config = config

    async def read(self, key: str) -> CacheRecord | None:
        """Return the record for logical ``key``, or ``None`` when absent."""
        raw = await self._store.get_json(self._config.storage_key(key))
        if raw is None:
            return None
        record = CacheRecord.from_stored(raw)
        if record is None:
            logger.warning(
                "Ignoring non-conforming cache value",
                extra={"cache_prefix": self._config.key_prefix, "cache_key": key},
            )
        return record

    async def write(self, key: str, value: Mapping[str, Any]) -> CacheRecord:
        """Filter, stamp and persist ``value`` under logical ``key``.

        The caller's mapping is never mutated.

        Returns:
            The record as written.
        """
        if self._config.set_filter is not None:
            value = self._config.set_filter(copy.deepcopy(dict(value)))
        if not isinstance(value, Mapping):
            raise TypeError(f"cache values must be mappings, got {type(value).__name__}")

        record = CacheRecord.stamp(value, epoch_ms())
        await self._store.set_json(self._config.storage_key(key), record.to_stored())
        return record

    async def delete(self, key: str) -> bool:
        """Delete the record for logical ``key``; True if one existed."""
        return await self._store.delete(self._config.storage_key(key))

    async def list_all(self) -> list[str]:
        """Return every storage key under this namespace's prefix."""
        return await self._store.keys(prefix_match_pattern(self._config.key_prefix))

    async def clear_all(self) -> int:
        """Delete every key under the prefix, one at a time.

        Best-effort: a key that fails to delete is logged and skipped.

        Returns:
            Number of keys actually deleted.
        """
        deleted = 0
        for storage_key in await self.list_all():
            try:
                if await self._store.delete(storage_key):
                    deleted += 1
            except Exception:
                logger.exception(
                    "Failed to delete cache record during clear-all",
                    extra={"cache_prefix": self._config.key_prefix, "storage_key": storage_key},
                )
        return deleted
