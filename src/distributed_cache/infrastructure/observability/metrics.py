# src/distributed_cache/infrastructure/observability/metrics.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Prometheus metrics for the cache layer (registry-aware, hot-reload safe).

Accessor functions return a collector bound to the **current**
``prometheus_client.REGISTRY``:
   - Safe under hot reload and tests that swap the default registry.
   - No duplicate-registration errors.
   - Cached collectors reset automatically when the active registry changes.

Two groups of collectors are exposed:

1) **Store operations**: latency and count of every backing-store call,
   labelled by ``operation`` and ``hit``.
2) **Cache outcomes**: how ``get_cache`` calls resolved and how often the
   populator was triggered, labelled by cache ``namespace``.

Example:
    get_cache_lookups_total().labels(namespace="Users:", outcome="fresh").inc()
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final, TypeVar

import prometheus_client as prom
from prometheus_client import Counter, Histogram

__all__ = [
    "get_store_operation_duration_seconds",
    "get_store_operations_total",
    "get_cache_lookups_total",
    "get_cache_population_attempts_total",
]

_log = logging.getLogger(__name__)

# Store calls are network round-trips; keep the low end fine-grained.
_BUCKETS: Final[tuple[float, ...]] = (
    0.001,
    0.0025,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
)

_C = TypeVar("_C", Counter, Histogram)

# Collectors keyed by metric name within the currently-active registry.
_registry_id: int | None = None
_collector_cache: dict[str, Counter | Histogram] = {}
_lock = threading.RLock()


def _ensure_registry() -> None:
    """Reset the collector cache if the active registry changed."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _collector_cache.clear()
            _registry_id = rid


def _lookup_existing(name: str, kind: type[_C]) -> _C | None:
    """Return a collector of ``kind`` already registered under ``name``."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


def _get_or_create(name: str, kind: type[_C], help_text: str, labelnames: tuple[str, ...]) -> _C:
    """Get or create a registry-bound collector with stable identity.

    Strategy:
        1. Return from module cache if present for the active registry.
        2. If the registry already has a collector by this name, reuse it.
        3. Otherwise register a new collector on the active registry.
        4. If concurrent registration reports a duplicate, retry step 2.

    Args:
        name: Metric name (snake_case).
        kind: ``Counter`` or ``Histogram``.
        help_text: Human-readable description.
        labelnames: Label names.

    Returns:
        Collector bound to ``prom.REGISTRY``.
    """
    _ensure_registry()
    with _lock:
        cached = _collector_cache.get(name)
        if isinstance(cached, kind):
            return cached

        existing = _lookup_existing(name, kind)
        if existing is not None:
            _collector_cache[name] = existing
            return existing

        try:
            if kind is Histogram:
                created = Histogram(
                    name, help_text, labelnames, buckets=_BUCKETS, registry=prom.REGISTRY
                )
            else:
                created = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, kind)
                if again is not None:
                    _collector_cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus collector %s", name)
            raise

        _collector_cache[name] = created
        return created  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Store operations


def get_store_operation_duration_seconds() -> Histogram:
    """Return histogram for backing-store call latency.

    Labels:
        operation: ``get_json`` / ``set_json`` / ``delete`` / ``keys``.
        hit: ``true``/``false``/``n/a``.
    """
    return _get_or_create(
        "cache_store_operation_duration_seconds",
        Histogram,
        "Latency (seconds) of cache backing-store operations.",
        ("operation", "hit"),
    )


def get_store_operations_total() -> Counter:
    """Return counter for backing-store calls (same labels as the histogram)."""
    return _get_or_create(
        "cache_store_operations_total",
        Counter,
        "Total cache backing-store operations.",
        ("operation", "hit"),
    )


# ---------------------------------------------------------------------------
# Cache outcomes


def get_cache_lookups_total() -> Counter:
    """Return counter for resolved ``get_cache`` calls.

    Labels:
        namespace: Cache key prefix.
        outcome: ``fresh``/``stale``/``default``/``absent``/``timeout``.
    """
    return _get_or_create(
        "cache_lookups_total",
        Counter,
        "Total cache lookups by namespace and outcome.",
        ("namespace", "outcome"),
    )


def get_cache_population_attempts_total() -> Counter:
    """Return counter for populator invocations.

    Labels:
        namespace: Cache key prefix.
        trigger: ``miss`` or ``stale``.
    """
    return _get_or_create(
        "cache_population_attempts_total",
        Counter,
        "Total populator invocations by namespace and trigger.",
        ("namespace", "trigger"),
    )
