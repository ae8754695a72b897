# src/distributed_cache/domain/services/durations.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Duration resolution for cache max-age and grace-time options.

Purpose:
    Normalize a configured duration into integer milliseconds. Accepted
    inputs:
        * ``None``: the caller's default.
        * ``int``: milliseconds as-is; ``-1`` is the "never expires" sentinel.
        * ``datetime.timedelta``: total milliseconds.
        * ``str``: a human duration such as ``"150ms"``, ``"2m"``, ``"1.5h"``
          or ``"1d"``. A bare number is milliseconds.

Layer:
    domain/services

Notes:
    - Resolution happens once, when a cache is configured.
    - Any unusable input raises :class:`ConfigurationError`.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Final, TypeAlias

from distributed_cache.domain.exceptions.cache import ConfigurationError
from distributed_cache.domain.services.staleness import NEVER_EXPIRES

__all__ = ["DurationInput", "parse_duration_ms", "resolve_duration_ms"]

DurationInput: TypeAlias = int | str | timedelta | None

_SECOND: Final[Decimal] = Decimal(1000)
_MINUTE: Final[Decimal] = _SECOND * 60
_HOUR: Final[Decimal] = _MINUTE * 60
_DAY: Final[Decimal] = _HOUR * 24
_WEEK: Final[Decimal] = _DAY * 7
_YEAR: Final[Decimal] = _DAY * Decimal("365.25")

_UNIT_MS: Final[dict[str, Decimal]] = {
    "": Decimal(1),
    "ms": Decimal(1),
    "msec": Decimal(1),
    "msecs": Decimal(1),
    "millisecond": Decimal(1),
    "milliseconds": Decimal(1),
    "s": _SECOND,
    "sec": _SECOND,
    "secs": _SECOND,
    "second": _SECOND,
    "seconds": _SECOND,
    "m": _MINUTE,
    "min": _MINUTE,
    "mins": _MINUTE,
    "minute": _MINUTE,
    "minutes": _MINUTE,
    "h": _HOUR,
    "hr": _HOUR,
    "hrs": _HOUR,
    "hour": _HOUR,
    "hours": _HOUR,
    "d": _DAY,
    "day": _DAY,
    "days": _DAY,
    "w": _WEEK,
    "week": _WEEK,
    "weeks": _WEEK,
    "y": _YEAR,
    "yr": _YEAR,
    "yrs": _YEAR,
    "year": _YEAR,
    "years": _YEAR,
}

_DURATION_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<amount>\d*\.?\d+)\s*(?P<unit>[a-z]*)$",
    re.IGNORECASE,
)

_MAX_DURATION_TEXT: Final[int] = 100


def parse_duration_ms(text: str) -> int:
    """Parse a human duration string into a positive millisecond count.

    Args:
        text: Duration such as ``"1d"``, ``"2 minutes"`` or ``"500"``.

    Returns:
        int: Milliseconds, rounded to the nearest integer.

    Raises:
        ConfigurationError: If the text is not a duration or is not positive.
    """
    candidate = text.strip()
    if not candidate or len(candidate) > _MAX_DURATION_TEXT:
        raise ConfigurationError(
            f"Unparseable duration string: {text!r}", details={"value": text}
        )

    match = _DURATION_RE.match(candidate)
    unit = match.group("unit").lower() if match else None
    if match is None or unit not in _UNIT_MS:
        raise ConfigurationError(
            f"Unparseable duration string: {text!r}", details={"value": text}
        )

    try:
        amount = Decimal(match.group("amount"))
    except InvalidOperation as exc:  # pragma: no cover - regex guarantees a number
        raise ConfigurationError(
            f"Unparseable duration string: {text!r}", details={"value": text}
        ) from exc

    ms = int((amount * _UNIT_MS[unit]).to_integral_value())
    if ms <= 0:
        raise ConfigurationError(
            f"Duration must be a positive number of milliseconds: {text!r}",
            details={"value": text},
        )
    return ms


def resolve_duration_ms(default_ms: int, value: DurationInput) -> int:
    """Resolve a configured duration into milliseconds.

    Args:
        default_ms: Value used when ``value`` is ``None``.
        value: Configured duration (see module docstring).

    Returns:
        int: Milliseconds, possibly :data:`NEVER_EXPIRES`.

    Raises:
        ConfigurationError: For negative integers other than ``-1``,
            non-positive timedeltas, unparseable strings, or unsupported types.
    """
    if value is None:
        return default_ms

    if isinstance(value, bool):
        raise ConfigurationError(
            "Duration must be milliseconds, a duration string or a timedelta",
            details={"value": value},
        )

    if isinstance(value, int):
        if value < 0 and value != NEVER_EXPIRES:
            raise ConfigurationError(
                f"Duration must be >= 0 or {NEVER_EXPIRES}: {value}", details={"value": value}
            )
        return value

    if isinstance(value, timedelta):
        ms = round(value.total_seconds() * 1000)
        if ms <= 0:
            raise ConfigurationError(
                f"Duration must be positive: {value}", details={"value": str(value)}
            )
        return ms

    if isinstance(value, str):
        return parse_duration_ms(value)

    raise ConfigurationError(
        "Duration must be milliseconds, a duration string or a timedelta",
        details={"value": repr(value)},
    )
