# src/distributed_cache/infrastructure/observability/cache_metrics.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Prometheus implementation of the cache metrics port."""

from __future__ import annotations

from contextlib import suppress

from distributed_cache.application.interfaces.cache_metrics_port import (
    CacheMetricsPort,
    LookupOutcome,
    PopulationTrigger,
)
from distributed_cache.infrastructure.observability.metrics import (
    get_cache_lookups_total,
    get_cache_population_attempts_total,
)

__all__ = ["PrometheusCacheMetrics"]


class PrometheusCacheMetrics(CacheMetricsPort):
    """Counts cache outcomes on the active Prometheus registry."""

    def record_lookup(self, namespace: str, outcome: LookupOutcome) -> None:
        with suppress(Exception):
            get_cache_lookups_total().labels(namespace=namespace, outcome=outcome).inc()

    def record_population(self, namespace: str, trigger: PopulationTrigger) -> None:
        with suppress(Exception):
            counter = get_cache_population_attempts_total()
            counter.labels(namespace=namespace, trigger=trigger).inc()
