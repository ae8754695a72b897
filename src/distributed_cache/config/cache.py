# src/distributed_cache/config/cache.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cache namespace configuration.

Summary:
    Immutable option set for one cache namespace (identified by its key
    prefix). Built once via :meth:`CacheConfiguration.build`, which validates
    every option and resolves duration inputs into milliseconds, then shared
    by every caller of that namespace.

Design:
    - Frozen dataclass; no field changes after construction.
    - Invalid options raise :class:`ConfigurationError` immediately, before
      any record is read or written.
    - Callables (populator, set filter, error sink) are injected as plain
      functions rather than subclass hooks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Final

from distributed_cache.application.interfaces.cache_callbacks import (
    CachePopulator,
    CacheSetFilter,
    ErrorSink,
    noop_populator,
)
from distributed_cache.domain.exceptions.cache import ConfigurationError
from distributed_cache.domain.services.durations import DurationInput, resolve_duration_ms
from distributed_cache.domain.services.key_codec import (
    DEFAULT_KEY_REPLACE_PATTERN,
    DEFAULT_KEY_REPLACE_WITH,
    make_key,
)

__all__ = [
    "DEFAULT_MAX_AGE_MS",
    "DEFAULT_GRACE_TIME_MS",
    "DEFAULT_MAX_TRIES",
    "CacheConfiguration",
]

DEFAULT_MAX_AGE_MS: Final[int] = 24 * 60 * 60 * 1000
DEFAULT_GRACE_TIME_MS: Final[int] = 150
DEFAULT_MAX_TRIES: Final[int] = 3


@dataclass(frozen=True, slots=True)
class CacheConfiguration:
    """Validated options controlling one cache namespace.

    Attributes:
        key_prefix: Namespace prefix for every storage key.
        max_age_ms: Staleness threshold in ms; ``-1`` never expires.
        grace_time_ms: Wait between population attempts on a miss.
        max_tries: Population attempts before a miss is exhausted.
        delete_on_expire: Delete stale records instead of repopulating and
            return ``None`` instead of failing when a miss is exhausted.
        default_value: Returned when a miss is exhausted; ``None`` means
            "not configured".
        key_replace_pattern: Sanitization pattern applied to logical keys.
        key_replace_with: Replacement for every sanitization match.
        set_filter: Optional transform applied before every write.
        populator: Invoked with the logical key on a miss or a stale hit.
        verbose_log: Log every state transition.
        error_sink: Optional receiver for background failures.
    """

    key_prefix: str
    max_age_ms: int = DEFAULT_MAX_AGE_MS
    grace_time_ms: int = DEFAULT_GRACE_TIME_MS
    max_tries: int = DEFAULT_MAX_TRIES
    delete_on_expire: bool = False
    default_value: Any = None
    key_replace_pattern: re.Pattern[str] = DEFAULT_KEY_REPLACE_PATTERN
    key_replace_with: str = DEFAULT_KEY_REPLACE_WITH
    set_filter: CacheSetFilter | None = None
    populator: CachePopulator = field(default=noop_populator)
    verbose_log: bool = False
    error_sink: ErrorSink | None = None

    @classmethod
    def build(
        cls,
        *,
        cache_key_prefix: str | None = None,
        cache_max_age_ms: DurationInput = None,
        cache_populator: CachePopulator | None = None,
        cache_populator_delete: bool = False,
        cache_populator_max_tries: int | None = None,
        cache_populator_ms_grace_time: DurationInput = None,
        cache_default_value: Any = None,
        cache_key_replace_regex: str | re.Pattern[str] | None = None,
        cache_key_replace_with: str | None = None,
        cache_set_filter: CacheSetFilter | None = None,
        verbose_log: bool = False,
        error_sink: ErrorSink | None = None,
    ) -> CacheConfiguration:
        """Validate raw cache options and return an immutable configuration.

        Option names mirror the documented cache option table. ``None`` for
        any optional argument selects its default.

        Raises:
            ConfigurationError: If the prefix is empty or absent, a duration
                cannot be resolved, ``cache_populator_max_tries`` is negative,
                the key pattern does not compile, or a callback is not callable.
        """
        if not cache_key_prefix or not isinstance(cache_key_prefix, str):
            raise ConfigurationError(
                "DistributedSystemsCache constructor called; the cacheKeyPrefix cannot "
                "be an empty string or undefined",
                details={"option": "cache_key_prefix"},
            )

        max_age_ms = resolve_duration_ms(DEFAULT_MAX_AGE_MS, cache_max_age_ms)
        grace_time_ms = resolve_duration_ms(DEFAULT_GRACE_TIME_MS, cache_populator_ms_grace_time)
        if grace_time_ms < 0:
            raise ConfigurationError(
                "cache_populator_ms_grace_time cannot be negative",
                details={"option": "cache_populator_ms_grace_time", "value": grace_time_ms},
            )

        max_tries = cache_populator_max_tries
        if max_tries is None:
            max_tries = DEFAULT_MAX_TRIES
        if isinstance(max_tries, bool) or not isinstance(max_tries, int) or max_tries < 0:
            raise ConfigurationError(
                "cache_populator_max_tries must be a non-negative integer",
                details={"option": "cache_populator_max_tries", "value": repr(max_tries)},
            )

        pattern = _compile_key_pattern(cache_key_replace_regex)
        replacement = cache_key_replace_with
        if replacement is None:
            replacement = DEFAULT_KEY_REPLACE_WITH

        for option, candidate in (
            ("cache_populator", cache_populator),
            ("cache_set_filter", cache_set_filter),
            ("error_sink", error_sink),
        ):
            if candidate is not None and not callable(candidate):
                raise ConfigurationError(
                    f"{option} must be callable", details={"option": option}
                )

        return cls(
            key_prefix=cache_key_prefix,
            max_age_ms=max_age_ms,
            grace_time_ms=grace_time_ms,
            max_tries=max_tries,
            delete_on_expire=bool(cache_populator_delete),
            default_value=cache_default_value,
            key_replace_pattern=pattern,
            key_replace_with=str(replacement),
            set_filter=cache_set_filter,
            populator=cache_populator or noop_populator,
            verbose_log=bool(verbose_log),
            error_sink=error_sink,
        )

    @property
    def grace_time_s(self) -> float:
        """Grace time in seconds, as expected by ``asyncio.sleep``."""
        return self.grace_time_ms / 1000

    @property
    def has_default(self) -> bool:
        """Whether a default value was configured."""
        return self.default_value is not None

    def storage_key(self, logical_key: str) -> str:
        """Return the namespaced, sanitized storage key for ``logical_key``."""
        return make_key(
            self.key_prefix,
            logical_key,
            pattern=self.key_replace_pattern,
            replacement=self.key_replace_with,
        )


def _compile_key_pattern(value: str | re.Pattern[str] | None) -> re.Pattern[str]:
    """Return the sanitization pattern for ``value`` (default when ``None``)."""
    if value is None:
        return DEFAULT_KEY_REPLACE_PATTERN
    if isinstance(value, re.Pattern):
        return value
    try:
        return re.compile(value)
    except (re.error, TypeError) as exc:
        raise ConfigurationError(
            f"cache_key_replace_regex is not a valid pattern: {value!r}",
            details={"option": "cache_key_replace_regex"},
        ) from exc
