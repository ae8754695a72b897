# src/distributed_cache/infrastructure/logging/logger.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes an idempotent root configurator and a per-module logger
factory that produce JSON logs suitable for ingestion by log pipelines.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Fields passed through ``extra=`` (e.g. ``cache_key``, ``fetch_attempt``)
      are copied into the payload.
    * Optional enrichment with ``request_id`` via record attribute or env var.
    * ``service`` and ``environment`` from :class:`Settings` on every line
      once :func:`configure_root_logging` has run.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
    log.info("getCache hit", extra={"cache_key": "user:42"})
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any, Final

from distributed_cache.config.settings import Settings, get_settings

__all__ = ["configure_root_logging", "get_json_logger"]

_REQUEST_ID_ENV_KEY = "REQUEST_ID"

# Attributes present on every LogRecord; anything else came from ``extra=``.
_RESERVED_ATTRS: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "request_id"}


class _JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and optional extras.

    Args:
        service: Service name stamped on every line, when set.
        environment: Deployment environment stamped on every line, when set.
    """

    def __init__(self, *, service: str | None = None, environment: str | None = None) -> None:
        super().__init__()
        self._static: dict[str, str] = {}
        if service:
            self._static["service"] = service
        if environment:
            self._static["environment"] = environment

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Logging record.

        Returns:
            str: JSON-encoded log line.
        """
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid: str | None = getattr(record, "request_id", None) or os.getenv(_REQUEST_ID_ENV_KEY)
        if rid:
            payload["request_id"] = rid

        payload.update(self._static)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key not in payload:
                payload[key] = value

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(
    level: str | int | None = None, *, settings: Settings | None = None
) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use ``Settings.log_level``
            (env ``LOG_LEVEL``) or ``INFO``.
        settings: Process settings; defaults to :func:`get_settings`.
    """
    settings = settings or get_settings()
    root = logging.getLogger()

    resolved: int | str = (
        level if level is not None else (settings.log_level or "INFO").upper()
    )
    root.setLevel(resolved)

    if root.handlers:
        # Already configured; avoid duplicate handlers.
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        _JsonFormatter(service=settings.service_name, environment=settings.environment.value)
    )
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module-specific logger backed by the JSON root handler.

    This does *not* implicitly configure the root logger. Call
    :func:`configure_root_logging` once at startup for global defaults.

    Args:
        name: Logger name, typically ``__name__`` of the caller.

    Returns:
        logging.Logger: Logger that propagates to the root handler.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.propagate = True
    return logger
