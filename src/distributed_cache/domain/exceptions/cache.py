# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Cache Domain Exceptions

Purpose:
    Error conditions raised by cache configuration and by the population
    state machine. Background revalidation failures are never raised through
    these types; they are routed to an error sink instead.

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class ConfigurationError(DomainError):
    """Cache options are invalid (empty prefix, unparseable duration, ...)."""

    code = "CACHE_CONFIGURATION_ERROR"


class CachePopulationTimeoutError(DomainError):
    """No record appeared for a key after every population attempt."""

    code = "CACHE_POPULATION_TIMEOUT"

    def __init__(self, key: str, *, grace_time_ms: int, attempts: int) -> None:
        super().__init__(
            f"No cache object found for {key!r}, cache not generated within the "
            f"cachePopulatorMsGraceTime of {grace_time_ms}",
            details={"key": key, "grace_time_ms": grace_time_ms, "attempts": attempts},
        )
        self.key = key
        self.grace_time_ms = grace_time_ms
        self.attempts = attempts
