# src/distributed_cache/application/interfaces/json_store_port.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application Interface: JSON Store Port.

Synopsis:
    Minimal key-value behavior the cache needs from its backing store. Keys
    passed here are already namespaced storage keys. Enables swapping Redis
    for an in-memory or fake implementation in tests.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class JsonStorePort(Protocol):
    """Structured-value store without TTL semantics."""

    async def get_json(self, key: str) -> Any | None:
        """Return the deserialized value at ``key``; ``None`` when absent or undecodable."""

    async def set_json(self, key: str, value: Any) -> None:
        """Serialize ``value`` and store it at ``key``, replacing any previous value."""

    async def delete(self, key: str) -> bool:
        """Delete ``key``.

        Returns:
            ``True`` if a value existed and was removed.
        """

    async def keys(self, pattern: str) -> list[str]:
        """Return every key matching the glob ``pattern``."""
