# src/distributed_cache/application/interfaces/cache_metrics_port.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Metrics Port.

Synopsis:
    Outcome counters emitted by the population state machine. Keeps the
    application layer free of any metrics backend; infrastructure provides a
    Prometheus implementation.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Literal, Protocol, TypeAlias

__all__ = ["CacheMetricsPort", "LookupOutcome", "NullCacheMetrics", "PopulationTrigger"]

LookupOutcome: TypeAlias = Literal["fresh", "stale", "default", "absent", "timeout"]
PopulationTrigger: TypeAlias = Literal["miss", "stale"]


class CacheMetricsPort(Protocol):
    """Sink for cache outcome counters. Implementations must never raise."""

    def record_lookup(self, namespace: str, outcome: LookupOutcome) -> None:
        """Count one resolved ``get_cache`` call."""

    def record_population(self, namespace: str, trigger: PopulationTrigger) -> None:
        """Count one populator invocation."""


class NullCacheMetrics:
    """Metrics sink that discards everything."""

    def record_lookup(self, namespace: str, outcome: LookupOutcome) -> None:
        return None

    def record_population(self, namespace: str, trigger: PopulationTrigger) -> None:
        return None
