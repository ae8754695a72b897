# src/distributed_cache/application/interfaces/cache_callbacks.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application Interface: injected cache callbacks.

Synopsis:
    Single-method collaborators supplied when a cache is configured:

        * ``CachePopulator``: side-effecting action that (re)writes the record
          for a logical key, usually by calling ``set_cache``. May be a
          coroutine function or a plain function.
        * ``CacheSetFilter``: value transform applied before every write.
        * ``ErrorSink``: receives failures from background work.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

__all__ = ["CachePopulator", "CacheSetFilter", "ErrorSink", "noop_populator"]

CachePopulator: TypeAlias = Callable[[str], Awaitable[None] | None]
CacheSetFilter: TypeAlias = Callable[[Mapping[str, Any]], Mapping[str, Any]]
ErrorSink: TypeAlias = Callable[[BaseException, str], None]


async def noop_populator(key: str) -> None:
    """Populator used when none is configured; never writes anything."""
    return None
