# src/distributed_cache/domain/entities/cache_record.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cache Record (Domain Entity).

Synopsis:
    A caller payload plus the reserved ``updatedAt`` stamp (milliseconds since
    the Unix epoch) written alongside it. On the wire the record is one JSON
    object: the payload keys merged with ``updatedAt``.

Layer:
    domain/entities
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from distributed_cache.domain.entities.base import BaseEntity

__all__ = ["UPDATED_AT_FIELD", "CacheRecord"]

#: Reserved field stamped onto every persisted record.
UPDATED_AT_FIELD: Final[str] = "updatedAt"


@dataclass(frozen=True, slots=True)
class CacheRecord(BaseEntity):
    """A cached payload and the time it was last written.

    Attributes:
        payload:
            Caller-supplied JSON mapping, without the reserved field.
        updated_at:
            Last-write timestamp in epoch milliseconds.
    """

    payload: Mapping[str, Any] = field(default_factory=dict)
    updated_at: int = 0

    def __post_init__(self) -> None:
        """Reject payloads that still carry the reserved field."""
        if UPDATED_AT_FIELD in self.payload:
            raise ValueError(f"payload must not contain the reserved {UPDATED_AT_FIELD!r} field")

    @classmethod
    def from_stored(cls, raw: Any) -> CacheRecord | None:
        """Rebuild a record from a stored JSON value.

        Values that are not JSON objects, or whose ``updatedAt`` is missing or
        not an integer, were not written by this cache and are reported as
        absent.

        Args:
            raw: Deserialized value read from the store.

        Returns:
            The record, or ``None`` when ``raw`` is not a conforming record.
        """
        if not isinstance(raw, Mapping):
            return None
        stamp = raw.get(UPDATED_AT_FIELD)
        if isinstance(stamp, bool) or not isinstance(stamp, int):
            return None
        payload = {k: v for k, v in raw.items() if k != UPDATED_AT_FIELD}
        return cls(payload=payload, updated_at=stamp)

    @classmethod
    def stamp(cls, value: Mapping[str, Any], now_ms: int) -> CacheRecord:
        """Build a record for ``value`` written at ``now_ms``.

        Any ``updatedAt`` already present in ``value`` is replaced.
        """
        payload = {k: v for k, v in value.items() if k != UPDATED_AT_FIELD}
        return cls(payload=payload, updated_at=now_ms)

    def to_stored(self) -> dict[str, Any]:
        """Return the JSON object persisted for this record."""
        return {**self.payload, UPDATED_AT_FIELD: self.updated_at}
