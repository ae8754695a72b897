# src/distributed_cache/domain/services/staleness.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Record age classification (pure domain logic, no store access)."""

from __future__ import annotations

import time
from typing import Final

__all__ = ["NEVER_EXPIRES", "epoch_ms", "is_stale"]

#: Max-age sentinel disabling expiry.
NEVER_EXPIRES: Final[int] = -1


def epoch_ms() -> int:
    """Return the wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def is_stale(updated_at: int, max_age_ms: int, *, now_ms: int | None = None) -> bool:
    """Return True when a record written at ``updated_at`` is older than ``max_age_ms``.

    An age exactly equal to ``max_age_ms`` is still fresh. ``max_age_ms == -1``
    never expires.

    Args:
        updated_at: Record write time in epoch milliseconds.
        max_age_ms: Resolved max age, or :data:`NEVER_EXPIRES`.
        now_ms: Evaluation time; defaults to the current wall clock.
    """
    if max_age_ms == NEVER_EXPIRES:
        return False
    now = epoch_ms() if now_ms is None else now_ms
    return (now - updated_at) > max_age_ms
