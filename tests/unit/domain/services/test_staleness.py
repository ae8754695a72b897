# tests/unit/domain/services/test_staleness.py
from __future__ import annotations

import pytest

from distributed_cache.domain.services.staleness import NEVER_EXPIRES, epoch_ms, is_stale

NOW = 1_700_000_000_000


@pytest.mark.parametrize("updated_at", [0, 321654, NOW - 10**12, NOW, NOW + 5_000])
def test_never_expires_sentinel_is_always_fresh(updated_at: int) -> None:
    """max_age -1 disables expiry regardless of timestamp."""
    assert is_stale(updated_at, NEVER_EXPIRES, now_ms=NOW) is False


def test_older_than_max_age_is_stale() -> None:
    assert is_stale(NOW - 1_001, 1_000, now_ms=NOW) is True


def test_within_window_is_fresh() -> None:
    assert is_stale(NOW - 999, 1_000, now_ms=NOW) is False


def test_exact_boundary_is_fresh() -> None:
    """Strict '>' comparison: an age equal to max_age is still fresh."""
    assert is_stale(NOW - 1_000, 1_000, now_ms=NOW) is False


def test_zero_max_age_expires_anything_older_than_now() -> None:
    assert is_stale(NOW - 1, 0, now_ms=NOW) is True
    assert is_stale(NOW, 0, now_ms=NOW) is False


def test_defaults_to_wall_clock() -> None:
    """Without an injected clock, very old stamps are stale and fresh ones are not."""
    assert is_stale(321654, 24 * 60 * 60 * 1000) is True
    assert is_stale(epoch_ms(), 60_000) is False
