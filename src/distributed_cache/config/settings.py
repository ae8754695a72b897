# src/distributed_cache/config/settings.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Distributed Cache Process Settings (Pydantic Settings, v2)

Summary:
    Typed, validated process-level configuration: where the backing Redis
    lives, how the shared client connects, and logging defaults. Per-namespace
    cache behavior lives in :mod:`distributed_cache.config.cache` instead.

Design:
    - Pydantic v2 BaseSettings reading the process environment and ``.env``.
    - ``extra='ignore'`` so a host application's ``.env`` can be shared.
    - ``populate_by_name`` so callers may pass field names directly.
    - Explicit field declarations with constrained ranges.
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed process configuration for the cache layer."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )

    # ---------------------------
    # Redis
    # ---------------------------
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL backing every cache namespace.",
        validation_alias="REDIS_URL",
    )
    redis_health_check_interval_s: int = Field(
        default=15,
        ge=1,
        le=3600,
        description="Health check interval for Redis clients in seconds.",
        validation_alias="REDIS_HEALTH_CHECK_INTERVAL_S",
    )
    redis_socket_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket timeout in seconds for Redis commands.",
        validation_alias="REDIS_SOCKET_TIMEOUT_S",
    )
    redis_socket_connect_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket connect timeout in seconds for Redis.",
        validation_alias="REDIS_SOCKET_CONNECT_TIMEOUT_S",
    )

    # ---------------------------
    # Logging / identity
    # ---------------------------
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO'). If not set, defaults are used.",
        validation_alias="LOG_LEVEL",
    )
    service_name: str | None = Field(
        default="distributed-cache",
        description="Logical service name for logging.",
        validation_alias="SERVICE_NAME",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated process settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "environment": settings.environment.value,
                "redis_url_set": bool(settings.redis_url),
                "service_name": settings.service_name,
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid cache process configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
